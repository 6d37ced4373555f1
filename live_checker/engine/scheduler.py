"""Bounded-concurrency scheduling of liveness probes."""

from __future__ import annotations

from concurrent.futures import ALL_COMPLETED, FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Collection, Iterator, Protocol, Sequence

import structlog

from ..config import SchedulingMode
from .aggregator import ProgressSnapshot
from .probe import CheckOutcome
from .run_state import RunState

ProgressCallback = Callable[[ProgressSnapshot], None]


class Probe(Protocol):
    def probe(self, uid: str) -> CheckOutcome: ...


def chunk_ids(ids: Sequence[str], size: int) -> Iterator[tuple[str, ...]]:
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(ids), size):
        yield tuple(ids[start : start + size])


class BatchScheduler:
    """Drive a probe over every id of a run without exceeding ``concurrency``.

    ``chunked`` mode launches fixed-size chunks and waits for the slowest
    member of each before reporting and moving on. ``pool`` mode refills a
    freed worker slot as soon as a probe finishes. Progress callbacks are
    always invoked from the calling thread, one at a time.
    """

    def __init__(
        self,
        probe: Probe,
        concurrency: int,
        mode: SchedulingMode = SchedulingMode.CHUNKED,
        failure_outcome: CheckOutcome = CheckOutcome.DEAD,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if concurrency <= 0:
            raise ValueError("concurrency must be > 0")
        self.probe = probe
        self.concurrency = concurrency
        self.mode = SchedulingMode(mode)
        self.failure_outcome = failure_outcome
        self.logger = logger or structlog.get_logger("live_checker.scheduler")

    def run(self, state: RunState, on_progress: ProgressCallback | None = None) -> ProgressSnapshot:
        if not state.ids:
            return state.snapshot()
        workers = min(self.concurrency, state.total)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as executor:
            if self.mode is SchedulingMode.POOL:
                self._run_pool(executor, state, on_progress)
            else:
                self._run_chunked(executor, state, on_progress)
        return state.snapshot()

    # ------------------------------------------------------------------
    def _run_chunked(
        self,
        executor: ThreadPoolExecutor,
        state: RunState,
        on_progress: ProgressCallback | None,
    ) -> None:
        for index, chunk in enumerate(chunk_ids(state.ids, self.concurrency)):
            if state.cancelled:
                break
            futures = [executor.submit(self._probe_one, uid) for uid in chunk]
            self._wait(futures, state)
            outcomes = [future.result() for future in futures]
            for uid, outcome in zip(chunk, outcomes):
                state.aggregator.record(uid, outcome)
            snapshot = state.snapshot()
            self.logger.debug(
                "chunk_completed",
                run_id=state.run_id,
                chunk=index,
                size=len(chunk),
                processed=snapshot.processed,
                total=snapshot.total,
            )
            self._emit(on_progress, snapshot)

    def _run_pool(
        self,
        executor: ThreadPoolExecutor,
        state: RunState,
        on_progress: ProgressCallback | None,
    ) -> None:
        pending = iter(state.ids)
        in_flight: dict[Future, str] = {}

        def _fill() -> None:
            while len(in_flight) < self.concurrency and not state.cancelled:
                uid = next(pending, None)
                if uid is None:
                    return
                in_flight[executor.submit(self._probe_one, uid)] = uid

        _fill()
        while in_flight:
            done, _ = self._wait(in_flight, state, FIRST_COMPLETED)
            for future in done:
                state.aggregator.record(in_flight.pop(future), future.result())
            self._emit(on_progress, state.snapshot())
            _fill()

    def _wait(
        self,
        futures: Collection[Future],
        state: RunState,
        return_when: str = ALL_COMPLETED,
    ) -> tuple[set[Future], set[Future]]:
        """Wait on ``futures``; Ctrl-C cancels the run and drains what is in flight."""

        try:
            return wait(futures, return_when=return_when)
        except KeyboardInterrupt:
            state.cancel()
            self.logger.warning("run_interrupted", run_id=state.run_id, in_flight=len(futures))
            return wait(futures)

    def _probe_one(self, uid: str) -> CheckOutcome:
        try:
            return CheckOutcome(self.probe.probe(uid))
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("probe_crashed", uid=uid, error=str(exc))
            return self.failure_outcome

    @staticmethod
    def _emit(on_progress: ProgressCallback | None, snapshot: ProgressSnapshot) -> None:
        if on_progress is not None:
            on_progress(snapshot)


__all__ = ["BatchScheduler", "ProgressCallback", "chunk_ids"]
