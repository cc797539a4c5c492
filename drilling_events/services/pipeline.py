from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, BinaryIO

from ..excel.reader import read_first_sheet
from ..logging.error_log import ErrorLogBuffer
from ..models.drilling_event import DEFAULT_SUBCATEGORY, DrillingEvent, RawRow
from ..models.error_record import ErrorRecord
from ..models.field_spec import DEFAULT_FIELD_SPECS, FIELD_WELL, FieldSpec
from ..models.ingest_result import IngestDiagnostics, IngestResult, IngestStatus, RowRejection
from ..parsing.columns import resolve_fields
from ..parsing.records import build_record

"""Sheet ingestion pipeline.

ingest() turns the rows of one sheet into canonical events:

1. Empty input returns an empty result (status EMPTY_INPUT), never an error
2. Headers are resolved once, from the first row's keys
3. Every row goes through the record builder; rejects are counted
4. Uploaded sheets are NOT de-duplicated (fresh uploads are authoritative)
5. Non-empty input with zero accepted rows is flagged NO_VALID_ROWS

Unreadable files raise SheetReadError from ingest_file() with no partial result.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ingest",
    "ingest_file",
]


def _expected_headers_hint(specs: Sequence[FieldSpec]) -> str:
    return "; ".join(f"{s.name}: {', '.join(s.synonyms)}" for s in specs)


def ingest(
    sheet_rows: Sequence[RawRow],
    *,
    field_specs: Sequence[FieldSpec] | None = None,
    default_subcategory: str = DEFAULT_SUBCATEGORY,
    error_log: ErrorLogBuffer | None = None,
    source_name: str = "<rows>",
    row_numbers: Sequence[int] | None = None,
) -> IngestResult:
    """Ingest one sheet worth of rows.

    Args:
        sheet_rows: header -> value mappings, all sharing the first row's header
        field_specs: logical fields and synonyms (defaults to DEFAULT_FIELD_SPECS)
        default_subcategory: sentinel for rows without a subcategory
        error_log: optional buffer receiving one ErrorRecord per rejected row
        source_name: label used in logs and error records (usually the file name)
        row_numbers: sheet row of each entry in sheet_rows, used as ErrorRecord.row;
            without it the 1-based data row index is recorded

    Returns:
        IngestResult with the accepted events (sheet order) and diagnostics

    Raises:
        ValueError: blank default_subcategory, or row_numbers of the wrong length
    """
    default_subcategory = default_subcategory.strip()
    if not default_subcategory:
        raise ValueError("default_subcategory must not be blank")
    if row_numbers is not None and len(row_numbers) != len(sheet_rows):
        raise ValueError(f"row_numbers has {len(row_numbers)} entries for {len(sheet_rows)} rows")
    specs = tuple(field_specs) if field_specs is not None else DEFAULT_FIELD_SPECS

    if not sheet_rows:
        logger.debug("source=%s empty sheet", source_name)
        return IngestResult(
            events=(),
            diagnostics=IngestDiagnostics(
                total_rows=0,
                accepted_rows=0,
                rejected_rows=0,
                status=IngestStatus.EMPTY_INPUT,
            ),
        )

    resolved = resolve_fields(sheet_rows[0].keys(), specs)
    logger.debug("source=%s resolved_columns=%s", source_name, resolved)
    if resolved.get(FIELD_WELL) is None:
        logger.warning("source=%s no well column found in headers %s", source_name, list(sheet_rows[0].keys()))

    events: list[DrillingEvent] = []
    rejections: list[RowRejection] = []
    for index, row in enumerate(sheet_rows):
        outcome = build_record(row, resolved, index, default_subcategory=default_subcategory)
        if isinstance(outcome, RowRejection):
            rejections.append(outcome)
            if error_log is not None:
                error_log.append(
                    ErrorRecord.create(
                        file=source_name,
                        row=row_numbers[index] if row_numbers is not None else index + 1,
                        error_type=outcome.reason.value,
                        message=outcome.detail or outcome.reason.value.lower().replace("_", " "),
                    )
                )
            continue
        events.append(outcome)

    status = IngestStatus.OK if events else IngestStatus.NO_VALID_ROWS
    if status is IngestStatus.NO_VALID_ROWS:
        logger.warning(
            "source=%s no valid rows (%d rejected). expected columns -> %s",
            source_name,
            len(rejections),
            _expected_headers_hint(specs),
        )
    else:
        logger.info(
            "source=%s accepted=%d rejected=%d",
            source_name,
            len(events),
            len(rejections),
        )

    return IngestResult(
        events=tuple(events),
        diagnostics=IngestDiagnostics(
            total_rows=len(sheet_rows),
            accepted_rows=len(events),
            rejected_rows=len(rejections),
            resolved_columns=resolved,
            rejections=tuple(rejections),
            status=status,
        ),
    )


def ingest_file(source: Path | str | bytes | BinaryIO, **kwargs: Any) -> IngestResult:
    """Read the first sheet of a spreadsheet and ingest it.

    Raises:
        SheetReadError: the bytes could not be decoded as a spreadsheet
    """
    sheet = read_first_sheet(source)
    if "source_name" not in kwargs and isinstance(source, (str, Path)):
        kwargs["source_name"] = Path(source).name
    return ingest(sheet.rows, row_numbers=sheet.row_numbers, **kwargs)
