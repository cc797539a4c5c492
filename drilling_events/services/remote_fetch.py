from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol

from ..db.event_store import StoreFetchError
from ..models.config_models import DEFAULT_MAX_ROWS, DEFAULT_PAGE_SIZE
from ..models.drilling_event import DrillingEvent
from ..models.ingest_result import FetchResult
from .dedup import dedupe

"""Paginated load of the remote event store.

Pages are requested strictly one after another (offset/limit contract, ordered
by depth). The loop stops on:

- an empty page
- a page shorter than the requested size
- the accumulated row count reaching max_rows (safety cap; rows already read
  are kept, no further page is requested)

Any page failure aborts the whole load. A partial well history is worse than
none, so nothing is returned in that case.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "PageSource",
    "fetch_all_events",
]


class PageSource(Protocol):
    def fetch_page(self, offset: int, limit: int) -> Sequence[DrillingEvent]: ...


def fetch_all_events(
    store: PageSource,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_rows: int = DEFAULT_MAX_ROWS,
) -> FetchResult:
    """Download every page from ``store`` and de-duplicate the merged rows.

    Raises:
        ValueError: page_size or max_rows is not positive
        StoreFetchError: any page request failed
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive: {page_size}")
    if max_rows <= 0:
        raise ValueError(f"max_rows must be positive: {max_rows}")

    rows: list[DrillingEvent] = []
    pages = 0
    cap_reached = False
    while True:
        offset = pages * page_size
        try:
            page = list(store.fetch_page(offset, page_size))
        except StoreFetchError:
            logger.error("fetch aborted at page=%d offset=%d", pages, offset)
            raise
        except Exception as e:
            logger.error("fetch aborted at page=%d offset=%d: %s", pages, offset, e)
            raise StoreFetchError(f"page {pages} (offset={offset}) failed: {e}") from e
        pages += 1

        if not page:
            break
        rows.extend(page)
        if len(rows) >= max_rows:
            cap_reached = True
            logger.warning(
                "safety cap reached (%d rows >= max_rows=%d); stopping download",
                len(rows),
                max_rows,
            )
            break
        if len(page) < page_size:
            break

    unique = dedupe(rows)
    logger.info(
        "fetched rows=%d unique=%d pages=%d",
        len(rows),
        len(unique),
        pages,
    )
    return FetchResult(
        events=tuple(unique),
        fetched_rows=len(rows),
        pages=pages,
        cap_reached=cap_reached,
    )
