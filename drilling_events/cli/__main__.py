from __future__ import annotations

import argparse
import os
import sys
from contextlib import ExitStack
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..db.connection import open_cursor
from ..db.event_store import EventStore, StoreFetchError
from ..excel.reader import SheetReadError, read_first_sheet
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import IngestConfig
from ..parsing.columns import resolve_fields
from ..services.orchestrator import ProcessingError, process_all, scan_source_files
from ..services.remote_fetch import fetch_all_events
from ..services.summary import (
    available_subcategories,
    available_wells,
    events_by_well,
    filter_events,
    render_summary_line,
)

"""CLI entrypoint.

Default run: ingest every .xlsx in source_directory and upload the events.
--inspect-data: print resolved columns and the first rows of each file, then exit.
--fetch: load the whole store (paginated + de-duplicated), print the well and
    subcategory catalogs and a per-well summary, optionally narrowed with
    --well / --subcategory.

DB connection is skipped with DISABLE_DB_CONNECT=1; a failed connection also
falls back to mock mode for the ingest run (nothing is uploaded).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so its DB settings win over inherited environment variables."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Drilling event spreadsheet ingester")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to ingest.yml")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print resolved columns & first rows then exit")
    p.add_argument("--fetch", action="store_true", help="Load all events from the store and summarize")
    p.add_argument("--well", action="append", default=None, help="With --fetch: only report this well (repeatable)")
    p.add_argument(
        "--subcategory", action="append", default=None, help="With --fetch: only report this subcategory (repeatable)"
    )
    return p.parse_args(argv)


def _inspect_data(cfg: IngestConfig) -> int:
    try:
        files = scan_source_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no .xlsx files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            sheet = read_first_sheet(f)
        except SheetReadError as e:
            print(f"  read_error: {e}")
            continue
        resolved = resolve_fields(sheet.columns, cfg.field_specs)
        print(f"  SHEET: {sheet.sheet_name} cols={sheet.columns}")
        print(f"  resolved={resolved}")
        safe_rows = [
            {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.items()}
            for r in sheet.rows[:3]
        ]
        print("    sample_rows=", safe_rows)
    return EXIT_SUCCESS_ALL


def _fetch(cfg: IngestConfig, logger, wells: list[str] | None = None, subcategories: list[str] | None = None) -> int:
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.error("fetch: database connection disabled (DISABLE_DB_CONNECT=1)")
        return EXIT_FATAL
    try:
        with open_cursor(cfg.database) as cur:
            store = EventStore(cur, table=cfg.store.table)
            result = fetch_all_events(store, page_size=cfg.store.page_size, max_rows=cfg.store.max_rows)
    except StoreFetchError as e:
        logger.error(f"fetch: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"fetch: database connection failed: {e}")
        return EXIT_FATAL

    logger.info(f"wells={','.join(available_wells(result.events))}")
    logger.info(f"subcategories={','.join(available_subcategories(result.events))}")
    selected = filter_events(result.events, wells=wells, subcategories=subcategories)
    for well, events in events_by_well(selected).items():
        logger.info(f"well={well} events={len(events)} max_depth={events[-1].depth:g}")
    log_summary(
        f"fetched={result.fetched_rows} unique={len(result.events)} "
        f"duplicates={result.duplicates_dropped} pages={result.pages} "
        f"cap_reached={str(result.cap_reached).lower()} selected={len(selected)}"
    )
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only -> read process args ([] from tests must not pick up pytest's argv)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.fetch:
        return _fetch(cfg, logger, wells=args.well, subcategories=args.subcategory)

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    logger.info(f"Processing files from: {directory}")

    if args.inspect_data:
        return _inspect_data(cfg)

    db_mode = "mock"
    with ExitStack() as stack:
        store = None
        if os.getenv("DISABLE_DB_CONNECT") == "1":
            logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        else:
            try:
                cur = stack.enter_context(open_cursor(cfg.database))
                store = EventStore(cur, table=cfg.store.table, page_size=cfg.store.page_size)
                db_mode = "live"
            except psycopg2.Error as db_e:
                logger.info(f"DB connection failed -> fallback to mock mode: {db_e}")
        try:
            result = process_all(cfg, store=store)
        except ProcessingError as e:
            logger.error(f"processing({db_mode}): {e}")
            return EXIT_FATAL

    logger.info(f"mode={db_mode} total_events={result.total_events}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
