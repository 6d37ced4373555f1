"""Plain-text export of a finished run's live/dead lists."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from .aggregator import ProgressSnapshot


class ResultExporter:
    """Write one id per line into ``live``/``dead``/``errors`` files."""

    def __init__(self, output_dir: Path, run_tag: str | None = None) -> None:
        self.output_dir = output_dir
        self.run_tag = run_tag or datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")

    def path_for(self, bucket: str) -> Path:
        return self.output_dir / f"{bucket}-{self.run_tag}.txt"

    def export(self, snapshot: ProgressSnapshot) -> list[Path]:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        buckets = {"live": snapshot.live, "dead": snapshot.dead, "errors": snapshot.errors}
        for bucket, ids in buckets.items():
            # live/dead are always written so a run leaves a predictable pair
            if not ids and bucket == "errors":
                continue
            path = self.path_for(bucket)
            path.write_text("".join(f"{uid}\n" for uid in ids), encoding="utf-8")
            written.append(path)
        return written


__all__ = ["ResultExporter"]
