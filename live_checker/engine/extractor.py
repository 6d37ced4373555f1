"""Identifier extraction from free-form pasted text."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator

ID_LENGTH = 14

# ASCII only; ``\d`` would also accept other Unicode digit characters.
_DIGIT_RUN = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class InputLines:
    """Non-empty input lines kept for one run."""

    lines: tuple[str, ...]
    dropped: int = 0

    @property
    def truncated(self) -> bool:
        return self.dropped > 0


def extract_id(line: str) -> str | None:
    """Return the 14-digit identifier embedded in ``line``, if any.

    A digit run of exactly 14 characters wins (first one by position). Failing
    that, the longest run is cut down to its first 14 digits; lines whose
    longest run is shorter yield ``None``.
    """

    runs = _DIGIT_RUN.findall(line)
    if not runs:
        return None
    for run in runs:
        if len(run) == ID_LENGTH:
            return run
    longest = max(runs, key=len)
    if len(longest) >= ID_LENGTH:
        return longest[:ID_LENGTH]
    return None


def split_lines(text: str, max_lines: int | None = None) -> InputLines:
    """Strip lines, drop blank ones and keep at most ``max_lines``."""

    lines = [line.strip() for line in text.split("\n")]
    lines = [line for line in lines if line]
    if max_lines is None or len(lines) <= max_lines:
        return InputLines(tuple(lines))
    return InputLines(tuple(lines[:max_lines]), dropped=len(lines) - max_lines)


def extract_ids(lines: Iterable[str]) -> Iterator[str | None]:
    for line in lines:
        yield extract_id(line)


__all__ = ["ID_LENGTH", "InputLines", "extract_id", "extract_ids", "split_lines"]
