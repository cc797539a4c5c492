from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .drilling_event import DrillingEvent

"""Result and diagnostics models for sheet ingestion, remote fetch and upload.

IngestStatus follows the same lifecycle-enum approach as the batch run's
FileStatus: callers branch on the enum instead of catching exceptions for the
non-fatal outcomes (empty sheet, no valid rows).
"""

__all__ = [
    "IngestStatus",
    "RejectReason",
    "RowRejection",
    "IngestDiagnostics",
    "IngestResult",
    "FetchResult",
    "WriteResult",
]


class IngestStatus(Enum):
    """Outcome of ingesting one sheet.

    - OK: at least one row was accepted
    - EMPTY_INPUT: the sheet had no data rows (not an error)
    - NO_VALID_ROWS: rows were present but every one was rejected
    """
    OK = "ok"
    EMPTY_INPUT = "empty_input"
    NO_VALID_ROWS = "no_valid_rows"


class RejectReason(Enum):
    MISSING_WELL = "MISSING_WELL"
    NEGATIVE_DEPTH = "NEGATIVE_DEPTH"


@dataclass(frozen=True)
class RowRejection:
    """A row dropped by the record builder."""
    row_index: int  # 0-based position among the sheet's data rows
    reason: RejectReason
    detail: str = ""


@dataclass(frozen=True)
class IngestDiagnostics:
    total_rows: int
    accepted_rows: int
    rejected_rows: int
    resolved_columns: dict[str, str | None] = field(default_factory=dict)  # field -> header
    rejections: tuple[RowRejection, ...] = ()
    status: IngestStatus = IngestStatus.OK

    @property
    def no_valid_rows(self) -> bool:
        return self.status is IngestStatus.NO_VALID_ROWS


@dataclass(frozen=True)
class IngestResult:
    events: tuple[DrillingEvent, ...]
    diagnostics: IngestDiagnostics


@dataclass(frozen=True)
class FetchResult:
    """Merged, de-duplicated view of the remote store."""
    events: tuple[DrillingEvent, ...]  # unique, first occurrence order
    fetched_rows: int  # rows read before dedup
    pages: int  # page requests issued
    cap_reached: bool = False  # stopped by the max_rows safety cap

    @property
    def duplicates_dropped(self) -> int:
        return self.fetched_rows - len(self.events)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a bulk upload; used_fallback marks the plain-insert path."""
    written_rows: int
    used_fallback: bool = False
