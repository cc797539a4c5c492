from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

"""DB batch insert.

Bulk INSERT through psycopg2.extras.execute_values. An optional ON CONFLICT
clause turns the insert into an upsert; the caller decides what to do when the
database rejects that clause (e.g. no matching unique constraint).
"""

logger = logging.getLogger(__name__)


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int  # rows submitted (ON CONFLICT DO NOTHING may skip some)
    returned_values: list[tuple[Any, ...]] | None = None
    elapsed_seconds: float = 0.0


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: Sequence[str] | None = None,
    on_conflict: str | None = None,
    page_size: int = 1000,
) -> InsertResult:
    """Perform batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table (trusted, from config)
    columns: insert columns
    rows: row value sequences, same order as ``columns``
    returning: columns for a RETURNING clause (fetched after execution)
    on_conflict: text appended after ``ON CONFLICT``, e.g.
        ``("pozo", "prof_desde") DO NOTHING``
    page_size: execute_values page_size
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_values=[] if returning else None)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    base_sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    if on_conflict:
        base_sql += f" ON CONFLICT {on_conflict}"
    if returning:
        base_sql += " RETURNING " + ",".join(f'"{c}"' for c in returning)

    start_time = time.time()
    try:
        if returning:
            returned = execute_values(cursor, base_sql, rows_list, page_size=page_size, fetch=True)
        else:
            execute_values(cursor, base_sql, rows_list, page_size=page_size)
            returned = None
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    elapsed = time.time() - start_time
    logger.debug("table=%s batch_size=%d elapsed_sec=%.4f", table, len(rows_list), elapsed)

    return InsertResult(inserted_rows=len(rows_list), returned_values=returned, elapsed_seconds=elapsed)
