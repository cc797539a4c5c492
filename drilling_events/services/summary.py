from __future__ import annotations

from collections.abc import Collection, Iterable

from ..models.drilling_event import DrillingEvent
from ..models.processing_result import ProcessingResult

"""Summary rendering and reporting helpers.

render_summary_line() produces the SUMMARY line of a batch run. The remaining
helpers derive the well/subcategory catalogs and filtered views that reporting
consumers build from the canonical collection.
"""

__all__ = [
    "available_subcategories",
    "available_wells",
    "events_by_well",
    "filter_events",
    "format_number",
    "render_summary_line",
]


def format_number(value: float) -> str:
    """Render 0 and whole numbers without decimals, tiny values without exponent."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a batch run.

    Format:
    SUMMARY files={total}/{total} success={s} failed={f} events={e}
    rejected={r} no_valid_rows={v} fallback_uploads={u} elapsed_sec={t}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=1, failed_files=0, total_events=12, total_rejected=1,
        ...     no_valid_rows_files=0, fallback_uploads=0,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1/1 success=1 failed=0 events=12 rejected=1 no_valid_rows=0 fallback_uploads=0 elapsed_sec=2'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"events={result.total_events} "
        f"rejected={result.total_rejected} "
        f"no_valid_rows={result.no_valid_rows_files} "
        f"fallback_uploads={result.fallback_uploads} "
        f"elapsed_sec={format_number(result.elapsed_seconds)}"
    )


def available_wells(events: Iterable[DrillingEvent]) -> list[str]:
    return sorted({e.well for e in events})


def available_subcategories(events: Iterable[DrillingEvent]) -> list[str]:
    return sorted({e.subcategory for e in events})


def filter_events(
    events: Iterable[DrillingEvent],
    wells: Collection[str] | None = None,
    subcategories: Collection[str] | None = None,
) -> list[DrillingEvent]:
    """Keep events whose well and subcategory are selected.

    An empty or None selection does not filter on that axis.
    """
    return [
        e
        for e in events
        if (not wells or e.well in wells) and (not subcategories or e.subcategory in subcategories)
    ]


def events_by_well(events: Iterable[DrillingEvent]) -> dict[str, list[DrillingEvent]]:
    """Group events per well (wells sorted), each list ordered by depth."""
    grouped: dict[str, list[DrillingEvent]] = {}
    for e in events:
        grouped.setdefault(e.well, []).append(e)
    return {well: sorted(grouped[well], key=lambda e: e.depth) for well in sorted(grouped)}
