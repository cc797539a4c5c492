from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Processing result models for a batch ingestion run.

One FileStat per spreadsheet plus the aggregated ProcessingResult used to render
the SUMMARY line.
"""


class FileStatus(Enum):
    """Status of a spreadsheet in a batch run.

    - SUCCESS: file read, ingested and (when a store is attached) uploaded
    - FAILED: unreadable file or failed upload
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics."""
    file_name: str
    status: FileStatus
    accepted_rows: int  # events produced by the pipeline
    rejected_rows: int  # rows dropped by the record builder
    elapsed_seconds: float
    no_valid_rows: bool = False  # non-empty sheet where every row was rejected
    used_fallback: bool = False  # upload went through the plain-insert path
    error: str | None = None  # failure reason summary


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results and summary output for a batch run."""
    success_files: int
    failed_files: int
    total_events: int
    total_rejected: int
    no_valid_rows_files: int
    fallback_uploads: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
