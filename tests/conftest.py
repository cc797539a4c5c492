# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from drilling_events.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
default_subcategory: Evento
store:
  table: drilling_events
  page_size: 2
  max_rows: 100
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def no_db(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


def make_workbook(path: Path, rows: list[list[Any]], sheet_name: str = "Eventos") -> Path:
    """Write ``rows`` (first row = header) as the first sheet of an .xlsx file."""
    df = pd.DataFrame(rows[1:], columns=rows[0])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    return path


class DummyCursor:
    """Records executed SQL; fetchall() returns queued pages in order."""

    def __init__(self, pages: list[list[tuple]] | None = None) -> None:
        self.executed: list[tuple[str, Any]] = []
        self.pages = list(pages or [])
        self.fail_on: str | None = None

    def execute(self, sql: str, params: Any = None) -> None:
        self.executed.append((sql, params))
        if self.fail_on and self.fail_on in sql:
            raise RuntimeError(f"boom: {sql}")

    def fetchall(self) -> list[tuple]:
        return self.pages.pop(0) if self.pages else []

    @property
    def statements(self) -> list[str]:
        return [sql for sql, _ in self.executed]


@pytest.fixture()
def workbook():
    return make_workbook


@pytest.fixture()
def cursor_factory():
    return DummyCursor
