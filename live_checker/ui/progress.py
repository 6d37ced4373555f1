"""Terminal progress helpers with Rich-based rendering."""

from __future__ import annotations

from rich.console import Console
from rich.errors import LiveError
from rich.progress import (
    BarColumn,
    Progress,
    ProgressColumn,
    SpinnerColumn,
    Task,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from ..engine import ProgressSnapshot


class RateColumn(ProgressColumn):
    """显示检测速率，格式为 "X.X id/s"。"""

    def render(self, task: Task) -> Text:
        speed = task.finished_speed or task.speed
        if speed is None:
            return Text("", style="progress.percentage")
        return Text(f"{speed:.1f} id/s", style="progress.percentage")


class ProgressReporter:
    """Render run snapshots as a single progress row."""

    def __init__(self, enabled: bool = True, console: Console | None = None) -> None:
        self.enabled = enabled
        self._console = console
        self._progress: Progress | None = None
        self._task_id: TaskID | None = None
        self.last_snapshot: ProgressSnapshot | None = None
        self.updates = 0

    def start(self, total: int, label: str = "账号检测") -> None:
        self.last_snapshot = ProgressSnapshot(processed=0, total=total)
        self.updates = 0
        if not self.enabled:
            return
        console = self._console or Console()
        if not console.is_terminal:
            # 非交互环境回退为静默模式
            self.enabled = False
            return
        self._progress = Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold blue]{task.fields[label]:<10}", justify="left"),
            BarColumn(bar_width=None, complete_style="green", finished_style="green"),
            TaskProgressColumn(show_speed=False),
            TextColumn("{task.completed:.0f}/{task.total:.0f}"),
            TimeElapsedColumn(),
            RateColumn(),
            TextColumn("[green]✓{task.fields[live]:>5}", justify="right"),
            TextColumn("[red]✗{task.fields[dead]:>5}", justify="right"),
            TextColumn("[yellow]?{task.fields[errors]:>4}", justify="right"),
            console=console,
            transient=True,
            refresh_per_second=12,
            expand=True,
        )
        try:
            self._progress.__enter__()
        except LiveError:
            # 同一控制台已存在活动进度条，退化为静默模式
            self.enabled = False
            self._progress = None
            return
        self._task_id = self._progress.add_task("check", total=total, label=label, live=0, dead=0, errors=0)

    def update(self, snapshot: ProgressSnapshot) -> None:
        if self.last_snapshot is None:
            raise RuntimeError("ProgressReporter.start must be called before update")
        self.last_snapshot = snapshot
        self.updates += 1
        if self._progress is not None and self._task_id is not None:
            self._progress.update(
                self._task_id,
                completed=snapshot.processed,
                live=len(snapshot.live),
                dead=len(snapshot.dead),
                errors=len(snapshot.errors),
            )

    def close(self) -> None:
        if self._progress is not None:
            self._progress.__exit__(None, None, None)
            self._progress = None
        self._task_id = None

    def __enter__(self) -> "ProgressReporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["ProgressReporter", "RateColumn"]
