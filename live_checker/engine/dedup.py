"""Order-preserving identifier deduplication."""

from __future__ import annotations

from typing import Iterable


def dedupe(candidates: Iterable[str | None]) -> tuple[str, ...]:
    """Collapse candidates into unique ids, keeping first-seen order."""

    seen: dict[str, None] = {}
    for candidate in candidates:
        if candidate:
            seen.setdefault(candidate, None)
    return tuple(seen)


__all__ = ["dedupe"]
