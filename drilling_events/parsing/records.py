from __future__ import annotations

import math
import uuid
from collections.abc import Mapping
from typing import Any

from ..models.drilling_event import DEFAULT_SUBCATEGORY, DrillingEvent, RawRow
from ..models.field_spec import FIELD_COMMENT, FIELD_DEPTH, FIELD_SUBCATEGORY, FIELD_WELL
from ..models.ingest_result import RejectReason, RowRejection
from .numeric import normalize_depth

"""Record builder: one raw sheet row -> DrillingEvent or RowRejection.

The well name is the only mandatory field. Everything else degrades to a
default (depth 0.0, default subcategory, empty comment).
"""

__all__ = [
    "build_record",
    "cell_text",
    "new_event_id",
]


def new_event_id(row_index: int) -> str:
    """Local id for a freshly parsed row; unique within one parse batch."""
    return f"evt-{row_index}-{uuid.uuid4().hex[:9]}"


def cell_text(value: Any) -> str:
    """Stringify a cell and strip it. None/NaN become ''.

    Whole floats are rendered without the trailing '.0' because spreadsheet
    readers hand back numeric well names (e.g. 101) as floats.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _value(raw_row: RawRow, key: str | None) -> Any:
    if key is None:
        return None
    return raw_row.get(key)


def build_record(
    raw_row: RawRow,
    resolved_keys: Mapping[str, str | None],
    row_index: int,
    *,
    default_subcategory: str = DEFAULT_SUBCATEGORY,
) -> DrillingEvent | RowRejection:
    """Build a canonical event from one row.

    Parameters
    ----------
    raw_row: header -> value mapping for the row
    resolved_keys: logical field -> sheet header (None when the column is absent)
    row_index: 0-based position of the row among the data rows
    default_subcategory: sentinel used when the subcategory is absent/blank
        (trimmed; a blank sentinel falls back to DEFAULT_SUBCATEGORY)
    """
    well = cell_text(_value(raw_row, resolved_keys.get(FIELD_WELL)))
    if not well:
        return RowRejection(row_index=row_index, reason=RejectReason.MISSING_WELL)

    depth_key = resolved_keys.get(FIELD_DEPTH)
    depth = normalize_depth(_value(raw_row, depth_key)) if depth_key is not None else 0.0
    if depth < 0:
        return RowRejection(
            row_index=row_index,
            reason=RejectReason.NEGATIVE_DEPTH,
            detail=f"well={well} depth={depth}",
        )

    subcategory = cell_text(_value(raw_row, resolved_keys.get(FIELD_SUBCATEGORY)))
    comment = cell_text(_value(raw_row, resolved_keys.get(FIELD_COMMENT)))

    return DrillingEvent(
        id=new_event_id(row_index),
        well=well,
        depth=depth,
        subcategory=subcategory or default_subcategory.strip() or DEFAULT_SUBCATEGORY,
        comment=comment,
    )
