from __future__ import annotations

from collections.abc import Iterable

from ..models.drilling_event import DrillingEvent

"""In-memory de-duplication of drilling events.

The remote store carries true duplicate rows (repeated uploads without a unique
constraint), so merged reads are collapsed on a composite key. ids and comments
do not take part in the key: two rows at the same well, depth and subcategory
are the same real-world event.
"""

__all__ = [
    "DedupKey",
    "dedup_key",
    "dedupe",
]

DedupKey = tuple[str, float, str]


def dedup_key(event: DrillingEvent) -> DedupKey:
    return (event.well.strip(), round(event.depth, 2), event.subcategory.strip())


def dedupe(records: Iterable[DrillingEvent]) -> list[DrillingEvent]:
    """Keep the first event seen for each DedupKey, preserving input order."""
    seen: set[DedupKey] = set()
    unique: list[DrillingEvent] = []
    for record in records:
        key = dedup_key(record)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique
