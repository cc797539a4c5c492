from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..db.event_store import EventStore, StoreWriteError
from ..excel.reader import SheetReadError
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import IngestConfig
from ..models.error_record import FILE_LEVEL_ROW, ErrorRecord
from ..models.processing_result import FileStat, FileStatus, ProcessingResult
from .pipeline import ingest_file
from .progress import ProgressTracker

"""Batch orchestration: ingest every spreadsheet of a directory.

process_all() scans the configured directory, runs the ingestion pipeline on
each workbook and, when a store is attached, uploads the accepted events.
Each upload runs inside its own savepoint so one failed file does not undo the
others. Unreadable workbooks and failed uploads mark the file failed and the
run continues; the error log is flushed once at the end.
"""

logger = logging.getLogger(__name__)

SPREADSHEET_SUFFIXES = (".xlsx",)


class ProcessingError(Exception):
    """Fatal error that prevents the batch run from starting."""


def scan_source_files(directory: Path) -> list[Path]:
    """List spreadsheets in ``directory`` (non-recursive, sorted by name).

    Raises:
        ProcessingError: directory missing, not a directory or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix.lower() in SPREADSHEET_SUFFIXES and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def process_all(
    config: IngestConfig,
    store: EventStore | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Ingest all spreadsheets in ``config.source_directory``.

    Args:
        config: run configuration
        store: event store for uploads (None = mock mode, nothing is written)
        error_log: buffer for row/file errors (a fresh one when omitted)

    Returns:
        ProcessingResult with aggregated counts and per-file stats

    Raises:
        ProcessingError: the source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    file_paths = scan_source_files(Path(config.source_directory))

    file_stats: list[FileStat] = []
    with ProgressTracker(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_file(file_path)
            stat = _process_single_file(file_path, config, store, error_log)
            file_stats.append(stat)
            progress.set_postfix(
                success=sum(1 for s in file_stats if s.status is FileStatus.SUCCESS),
                failed=sum(1 for s in file_stats if s.status is FileStatus.FAILED),
            )
            progress.finish_file()

    log_path = error_log.flush()
    if log_path is not None:
        logger.info("error log written: %s", log_path)

    end_time = datetime.now(UTC)
    succeeded = [s for s in file_stats if s.status is FileStatus.SUCCESS]
    return ProcessingResult(
        success_files=len(succeeded),
        failed_files=len(file_stats) - len(succeeded),
        total_events=sum(s.accepted_rows for s in succeeded),
        total_rejected=sum(s.rejected_rows for s in file_stats),
        no_valid_rows_files=sum(1 for s in file_stats if s.no_valid_rows),
        fallback_uploads=sum(1 for s in file_stats if s.used_fallback),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )


def _process_single_file(
    file_path: Path,
    config: IngestConfig,
    store: EventStore | None,
    error_log: ErrorLogBuffer,
) -> FileStat:
    start = datetime.now(UTC)

    def _elapsed() -> float:
        return (datetime.now(UTC) - start).total_seconds()

    try:
        result = ingest_file(
            file_path,
            field_specs=config.field_specs,
            default_subcategory=config.default_subcategory,
            error_log=error_log,
            source_name=file_path.name,
        )
    except SheetReadError as e:
        logger.error("file=%s unreadable: %s", file_path.name, e)
        error_log.append(ErrorRecord.create(file_path.name, FILE_LEVEL_ROW, "SHEET_READ_ERROR", str(e)))
        return FileStat(
            file_name=file_path.name,
            status=FileStatus.FAILED,
            accepted_rows=0,
            rejected_rows=0,
            elapsed_seconds=_elapsed(),
            error=str(e),
        )

    diagnostics = result.diagnostics
    used_fallback = False
    if store is not None and result.events:
        try:
            with store.savepoint("file_upload"):
                write = store.upload_events(result.events)
        except StoreWriteError as e:
            logger.error("file=%s upload failed: %s", file_path.name, e)
            error_log.append(ErrorRecord.create(file_path.name, FILE_LEVEL_ROW, "STORE_WRITE_ERROR", str(e)))
            return FileStat(
                file_name=file_path.name,
                status=FileStatus.FAILED,
                accepted_rows=diagnostics.accepted_rows,
                rejected_rows=diagnostics.rejected_rows,
                elapsed_seconds=_elapsed(),
                no_valid_rows=diagnostics.no_valid_rows,
                error=str(e),
            )
        used_fallback = write.used_fallback
    elif store is None:
        logger.debug("file=%s mock mode, %d events not uploaded", file_path.name, len(result.events))

    return FileStat(
        file_name=file_path.name,
        status=FileStatus.SUCCESS,
        accepted_rows=diagnostics.accepted_rows,
        rejected_rows=diagnostics.rejected_rows,
        elapsed_seconds=_elapsed(),
        no_valid_rows=diagnostics.no_valid_rows,
        used_fallback=used_fallback,
    )
