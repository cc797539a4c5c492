from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..models.config_models import DatabaseConfig

"""Database connection handle.

There is no module-level client: callers build a DatabaseConfig, resolve a DSN
and open a cursor explicitly, then hand that cursor to EventStore.

DSN resolution order:
    1. DATABASE_URL / PGDSN (full DSN as-is)
    2. database.dsn from config
    3. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, falling back per
       key to the config's database section, then libpq defaults
"""

logger = logging.getLogger(__name__)

__all__ = [
    "open_cursor",
    "resolve_dsn",
]


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def open_cursor(db_cfg: DatabaseConfig) -> Iterator[Any]:
    """Yield a psycopg2 cursor; commit on clean exit, roll back on error."""
    conn = psycopg2.connect(resolve_dsn(db_cfg))
    logger.debug("database connection opened")
    conn.autocommit = False
    cur = conn.cursor()
    try:
        yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()
