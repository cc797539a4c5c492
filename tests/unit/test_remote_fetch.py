from __future__ import annotations

import pytest

from drilling_events.db.event_store import StoreFetchError
from drilling_events.models.drilling_event import DrillingEvent
from drilling_events.services.remote_fetch import fetch_all_events


def _evt(i, well="A", sub="X"):
    return DrillingEvent(id=str(i), well=well, depth=float(i), subcategory=sub)


class PagedSource:
    """In-memory store honoring the offset/limit contract."""

    def __init__(self, rows, fail_at_offset=None, error=None):
        self.rows = list(rows)
        self.calls = []
        self.fail_at_offset = fail_at_offset
        self.error = error or RuntimeError("network down")

    def fetch_page(self, offset, limit):
        self.calls.append((offset, limit))
        if self.fail_at_offset is not None and offset == self.fail_at_offset:
            raise self.error
        return self.rows[offset:offset + limit]


class ScriptedSource:
    """Returns fixed pages regardless of offset."""

    def __init__(self, pages):
        self.pages = list(pages)
        self.calls = []

    def fetch_page(self, offset, limit):
        self.calls.append((offset, limit))
        return self.pages.pop(0) if self.pages else []


def test_stops_on_short_page():
    source = PagedSource([_evt(i) for i in range(5)])
    result = fetch_all_events(source, page_size=2, max_rows=100)
    assert source.calls == [(0, 2), (2, 2), (4, 2)]
    assert result.pages == 3
    assert result.fetched_rows == 5
    assert [e.id for e in result.events] == ["0", "1", "2", "3", "4"]
    assert not result.cap_reached


def test_exact_multiple_needs_one_empty_page():
    source = PagedSource([_evt(i) for i in range(4)])
    result = fetch_all_events(source, page_size=2, max_rows=100)
    assert source.calls == [(0, 2), (2, 2), (4, 2)]
    assert result.fetched_rows == 4


def test_empty_store():
    result = fetch_all_events(PagedSource([]), page_size=10)
    assert result.events == ()
    assert result.pages == 1
    assert result.duplicates_dropped == 0


def test_cap_stops_download_and_keeps_rows(caplog):
    source = PagedSource([_evt(i) for i in range(10)])
    result = fetch_all_events(source, page_size=3, max_rows=5)
    assert result.cap_reached
    assert result.fetched_rows == 6
    assert len(source.calls) == 2
    assert "safety cap reached" in caplog.text


def test_repeated_page_is_collapsed_to_first_occurrence():
    page = [_evt(1), _evt(2)]
    repeated = [DrillingEvent(id=f"dup-{e.id}", well=e.well, depth=e.depth, subcategory=e.subcategory) for e in page]
    source = ScriptedSource([page, repeated, []])
    result = fetch_all_events(source, page_size=2, max_rows=100)
    assert [e.id for e in result.events] == ["1", "2"]
    assert result.fetched_rows == 4
    assert result.duplicates_dropped == 2


def test_no_key_appears_twice():
    rows = [_evt(i % 4, well=f"W{i % 2}") for i in range(20)]
    result = fetch_all_events(PagedSource(rows), page_size=6)
    keys = [(e.well, round(e.depth, 2), e.subcategory) for e in result.events]
    assert len(keys) == len(set(keys))


def test_page_failure_aborts_whole_load():
    source = PagedSource([_evt(i) for i in range(10)], fail_at_offset=4)
    with pytest.raises(StoreFetchError, match="offset=4"):
        fetch_all_events(source, page_size=2)


def test_store_fetch_error_is_propagated_as_is():
    original = StoreFetchError("permission denied")
    source = PagedSource([_evt(1)], fail_at_offset=0, error=original)
    with pytest.raises(StoreFetchError) as exc_info:
        fetch_all_events(source, page_size=2)
    assert exc_info.value is original


@pytest.mark.parametrize("page_size, max_rows", [(0, 10), (-1, 10), (10, 0)])
def test_rejects_non_positive_arguments(page_size, max_rows):
    with pytest.raises(ValueError):
        fetch_all_events(PagedSource([]), page_size=page_size, max_rows=max_rows)
