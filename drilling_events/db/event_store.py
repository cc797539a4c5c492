from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from ..models.config_models import DEFAULT_TABLE
from ..models.drilling_event import DEFAULT_SUBCATEGORY, DrillingEvent
from ..models.ingest_result import WriteResult
from .batch_insert import BatchInsertError, batch_insert

"""PostgreSQL-backed drilling event store.

Table layout (column names are the operators' historical ones):

    id                store-generated primary key
    pozo              well name
    prof_desde        depth (m)
    subcategoria_npt  subcategory
    comentario        comment (nullable)

Reads are offset/limit pages ordered by depth. Writes try an upsert keyed on
(pozo, prof_desde, subcategoria_npt) first; when the table lacks that unique
constraint the database rejects ON CONFLICT and we fall back to a plain insert.
Duplicates created by the fallback are masked by the read-side dedup.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "EventStore",
    "StoreFetchError",
    "StoreWriteError",
    "STORE_COLUMNS",
]

ID_COLUMN = "id"
WELL_COLUMN = "pozo"
DEPTH_COLUMN = "prof_desde"
SUBCATEGORY_COLUMN = "subcategoria_npt"
COMMENT_COLUMN = "comentario"

# Columns written by uploads (id is generated by the store)
STORE_COLUMNS = (WELL_COLUMN, DEPTH_COLUMN, SUBCATEGORY_COLUMN, COMMENT_COLUMN)
_SELECT_COLUMNS = (ID_COLUMN, *STORE_COLUMNS)
_CONFLICT_TARGET = f'("{WELL_COLUMN}","{DEPTH_COLUMN}","{SUBCATEGORY_COLUMN}") DO NOTHING'
_SAVEPOINT = "upsert_events"


class StoreFetchError(Exception):
    """Reading a page from the store failed."""


class StoreWriteError(Exception):
    """A write to the store failed (for bulk uploads: both attempts)."""


def _event_from_row(row: Sequence[Any]) -> DrillingEvent:
    row_id, well, depth, subcategory, comment = row
    return DrillingEvent(
        id=str(row_id),
        well=str(well).strip() if well is not None else "",
        depth=float(depth) if depth is not None else 0.0,
        subcategory=(str(subcategory).strip() if subcategory is not None else "") or DEFAULT_SUBCATEGORY,
        comment=str(comment).strip() if comment is not None else "",
    )


def _payload(events: Sequence[DrillingEvent]) -> list[tuple[Any, ...]]:
    # local ids are dropped so the store assigns its own
    return [(e.well, e.depth, e.subcategory, e.comment) for e in events]


class EventStore:
    """Drilling event table accessed through an explicit psycopg2 cursor.

    Transaction boundaries belong to the caller (see db.connection.open_cursor);
    upload_events only uses a savepoint to isolate the upsert attempt.
    """

    def __init__(self, cursor: Any, table: str = DEFAULT_TABLE, page_size: int = 1000) -> None:
        self.cursor = cursor
        self.table = table
        self.page_size = page_size  # execute_values page size for uploads

    def _control(self, sql: str) -> None:
        try:
            self.cursor.execute(sql)
        except Exception as e:
            raise StoreWriteError(f"{sql}: {e}") from e

    @contextmanager
    def savepoint(self, name: str) -> Iterator[None]:
        """Roll the block's writes back to a savepoint if it raises."""
        self._control(f"SAVEPOINT {name}")
        try:
            yield
        except Exception:
            self._control(f"ROLLBACK TO SAVEPOINT {name}")
            raise
        self._control(f"RELEASE SAVEPOINT {name}")

    def fetch_page(self, offset: int, limit: int) -> list[DrillingEvent]:
        """Return up to ``limit`` events starting at ``offset``, ordered by depth.

        Raises:
            StoreFetchError: the query failed
        """
        cols_sql = ",".join(f'"{c}"' for c in _SELECT_COLUMNS)
        sql = (
            f'SELECT {cols_sql} FROM {self.table} '
            f'ORDER BY "{DEPTH_COLUMN}" ASC LIMIT %s OFFSET %s'
        )
        try:
            self.cursor.execute(sql, (limit, offset))
            rows = self.cursor.fetchall()
        except Exception as e:
            raise StoreFetchError(f"fetch_page offset={offset} limit={limit}: {e}") from e
        return [_event_from_row(r) for r in rows]

    def upload_events(self, events: Sequence[DrillingEvent]) -> WriteResult:
        """Bulk write events: upsert first, plain insert as explicit fallback.

        Returns:
            WriteResult with used_fallback=True when the insert path ran

        Raises:
            StoreWriteError: both attempts failed
        """
        payload = _payload(events)
        if not payload:
            return WriteResult(written_rows=0, used_fallback=False)

        self._control(f"SAVEPOINT {_SAVEPOINT}")
        try:
            result = batch_insert(
                self.cursor,
                self.table,
                STORE_COLUMNS,
                payload,
                on_conflict=_CONFLICT_TARGET,
                page_size=self.page_size,
            )
        except BatchInsertError as upsert_error:
            logger.warning(
                "upsert into %s failed (unique constraint on %s missing?); falling back to plain insert: %s",
                self.table,
                ",".join(STORE_COLUMNS[:3]),
                upsert_error,
            )
            self._control(f"ROLLBACK TO SAVEPOINT {_SAVEPOINT}")
            try:
                result = batch_insert(
                    self.cursor,
                    self.table,
                    STORE_COLUMNS,
                    payload,
                    page_size=self.page_size,
                )
            except BatchInsertError as insert_error:
                logger.error("insert fallback into %s failed: %s", self.table, insert_error)
                raise StoreWriteError(
                    f"upsert failed ({upsert_error}); insert fallback failed ({insert_error})"
                ) from insert_error
            self._control(f"RELEASE SAVEPOINT {_SAVEPOINT}")
            logger.info("table=%s inserted=%d via fallback", self.table, result.inserted_rows)
            return WriteResult(written_rows=result.inserted_rows, used_fallback=True)

        self._control(f"RELEASE SAVEPOINT {_SAVEPOINT}")
        logger.info("table=%s upserted=%d", self.table, result.inserted_rows)
        return WriteResult(written_rows=result.inserted_rows, used_fallback=False)

    def create_event(
        self,
        well: str,
        depth: float,
        subcategory: str,
        comment: str = "",
    ) -> DrillingEvent:
        """Insert a single manually entered event and return it with its store id.

        Raises:
            ValueError: blank well/subcategory or negative depth
            StoreWriteError: the insert failed
        """
        well = (well or "").strip()
        subcategory = (subcategory or "").strip()
        if not well:
            raise ValueError("well is required")
        if not subcategory:
            raise ValueError("subcategory is required")
        if depth is None or float(depth) < 0:
            raise ValueError(f"depth must be >= 0: {depth}")
        event = DrillingEvent(
            id="",
            well=well,
            depth=float(depth),
            subcategory=subcategory,
            comment=(comment or "").strip(),
        )
        try:
            result = batch_insert(
                self.cursor,
                self.table,
                STORE_COLUMNS,
                _payload([event]),
                returning=_SELECT_COLUMNS,
            )
        except BatchInsertError as e:
            raise StoreWriteError(f"create_event failed: {e}") from e
        if not result.returned_values:
            raise StoreWriteError("create_event: store returned no row")
        return _event_from_row(result.returned_values[0])
