"""Explicit per-run state handed to the scheduler."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Event
from uuid import uuid4

from .aggregator import ProgressSnapshot, ResultAggregator
from .dedup import dedupe


@dataclass
class RunState:
    """Identifiers, aggregator and cancellation flag owned by one run."""

    ids: tuple[str, ...]
    aggregator: ResultAggregator = field(init=False)
    run_id: str = field(default_factory=lambda: uuid4().hex[:12])
    _cancel_event: Event = field(default_factory=Event, init=False, repr=False)

    def __post_init__(self) -> None:
        # ids are unique within a run
        self.ids = dedupe(self.ids)
        self.aggregator = ResultAggregator(self.ids)

    @property
    def total(self) -> int:
        return len(self.ids)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Stop launching new probes; in-flight probes still get recorded."""

        self._cancel_event.set()

    def snapshot(self) -> ProgressSnapshot:
        return self.aggregator.snapshot()


__all__ = ["RunState"]
