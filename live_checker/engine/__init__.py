"""Engine components orchestrating extract → dedupe → probe → aggregate."""

from .aggregator import ProgressSnapshot, ResultAggregator
from .dedup import dedupe
from .exporter import ResultExporter
from .extractor import InputLines, extract_id, extract_ids, split_lines
from .probe import CheckOutcome, LivenessProbe
from .run_state import RunState
from .scheduler import BatchScheduler, ProgressCallback, chunk_ids

__all__ = [
    "BatchScheduler",
    "CheckOutcome",
    "InputLines",
    "LivenessProbe",
    "ProgressCallback",
    "ProgressSnapshot",
    "ResultAggregator",
    "ResultExporter",
    "RunState",
    "chunk_ids",
    "dedupe",
    "extract_id",
    "extract_ids",
    "split_lines",
]
