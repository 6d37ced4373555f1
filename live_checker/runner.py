"""Run coordinator wiring extraction, deduplication, probing and aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock

import structlog

from .config import CheckerConfig
from .engine import (
    BatchScheduler,
    CheckOutcome,
    InputLines,
    LivenessProbe,
    ProgressCallback,
    ProgressSnapshot,
    RunState,
    dedupe,
    extract_ids,
    split_lines,
)
from .engine.scheduler import Probe
from .logging_conf import configure_logging


class InputValidationError(ValueError):
    """Raised before any probing when the input cannot start a run."""


class EmptyInputError(InputValidationError):
    pass


class NoValidIdsError(InputValidationError):
    pass


class RunInProgressError(RuntimeError):
    """Raised when a second run is started on a busy runner."""


@dataclass(frozen=True, slots=True)
class PreparedInput:
    """Validated, deduplicated identifiers ready to be probed."""

    ids: tuple[str, ...]
    lines: InputLines

    @property
    def line_count(self) -> int:
        return len(self.lines.lines)

    @property
    def dropped_lines(self) -> int:
        return self.lines.dropped


class CheckRunner:
    """Central coordinator for check runs; one run at a time."""

    def __init__(
        self,
        config: CheckerConfig,
        probe: Probe | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or configure_logging().bind(component="runner")
        self._probe = probe
        self._lock = Lock()
        self._active: RunState | None = None

    # ------------------------------------------------------------------
    def prepare(self, text: str) -> PreparedInput:
        if not text or not text.strip():
            raise EmptyInputError("请先输入要检测的账号")
        lines = split_lines(text, self.config.max_ids)
        ids = dedupe(extract_ids(lines.lines))
        if not ids:
            raise NoValidIdsError("没有找到有效的账号 ID")
        return PreparedInput(ids=ids, lines=lines)

    def new_state(self, prepared: PreparedInput) -> RunState:
        return RunState(prepared.ids)

    @property
    def busy(self) -> bool:
        return self._active is not None

    def run(
        self,
        prepared: PreparedInput | str,
        on_progress: ProgressCallback | None = None,
        state: RunState | None = None,
    ) -> ProgressSnapshot:
        if isinstance(prepared, str):
            prepared = self.prepare(prepared)
        state = state or self.new_state(prepared)
        with self._lock:
            if self._active is not None:
                raise RunInProgressError(f"Run {self._active.run_id} is still in progress")
            self._active = state

        log = self.logger.bind(run_id=state.run_id)
        log.info(
            "run_started",
            total=state.total,
            lines=prepared.line_count,
            dropped_lines=prepared.dropped_lines,
            concurrency=self.config.concurrency_bound,
            mode=self.config.scheduling.value,
        )
        probe = self._probe
        owned_probe: LivenessProbe | None = None
        if probe is None:
            owned_probe = LivenessProbe(self.config, logger=log.bind(component="probe"))
            probe = owned_probe
        scheduler = BatchScheduler(
            probe,
            self.config.concurrency_bound,
            mode=self.config.scheduling,
            failure_outcome=getattr(probe, "failure_outcome", self._failure_outcome()),
            logger=log.bind(component="scheduler"),
        )
        try:
            snapshot = scheduler.run(state, on_progress)
        finally:
            if owned_probe is not None:
                owned_probe.close()
            with self._lock:
                self._active = None

        if state.cancelled:
            log.warning("run_cancelled", processed=snapshot.processed, total=snapshot.total)
        log.info(
            "run_finished",
            processed=snapshot.processed,
            total=snapshot.total,
            live=len(snapshot.live),
            dead=len(snapshot.dead),
            errors=len(snapshot.errors),
        )
        return snapshot

    def cancel(self) -> bool:
        """Cancel the active run, if any."""

        with self._lock:
            state = self._active
        if state is None:
            return False
        state.cancel()
        return True

    def _failure_outcome(self) -> CheckOutcome:
        return CheckOutcome.ERROR if self.config.report_errors else CheckOutcome.DEAD


__all__ = [
    "CheckRunner",
    "EmptyInputError",
    "InputValidationError",
    "NoValidIdsError",
    "PreparedInput",
    "RunInProgressError",
]
