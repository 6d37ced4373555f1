"""Incremental aggregation of probe outcomes into snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .probe import CheckOutcome


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """Immutable point-in-time view of one run."""

    processed: int
    total: int
    live: tuple[str, ...] = ()
    dead: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def finished(self) -> bool:
        return self.processed >= self.total

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return self.processed / self.total * 100


class ResultAggregator:
    """Accumulate outcomes for the ids of a single run."""

    def __init__(self, ids: Iterable[str]) -> None:
        self._members = frozenset(ids)
        self._total = len(self._members)
        self._seen: set[str] = set()
        self._buckets: dict[CheckOutcome, list[str]] = {outcome: [] for outcome in CheckOutcome}

    @property
    def total(self) -> int:
        return self._total

    @property
    def processed(self) -> int:
        return len(self._seen)

    def record(self, uid: str, outcome: CheckOutcome) -> None:
        if uid not in self._members:
            raise ValueError(f"Identifier {uid} is not part of this run")
        if uid in self._seen:
            raise ValueError(f"Identifier {uid} was already recorded")
        self._seen.add(uid)
        self._buckets[CheckOutcome(outcome)].append(uid)

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            processed=self.processed,
            total=self._total,
            live=tuple(self._buckets[CheckOutcome.LIVE]),
            dead=tuple(self._buckets[CheckOutcome.DEAD]),
            errors=tuple(self._buckets[CheckOutcome.ERROR]),
        )


__all__ = ["ProgressSnapshot", "ResultAggregator"]
