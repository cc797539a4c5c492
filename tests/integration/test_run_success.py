from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import pytest

from drilling_events.cli import main as cli_main

"""Integration test: successful multi-file run in mock mode.

Real .xlsx files go through the whole CLI path (config -> scan -> read ->
ingest -> summary) with DISABLE_DB_CONNECT=1.
"""

SUMMARY_RE = re.compile(
    r"^SUMMARY files=(\d+)/\1 success=(\d+) failed=(\d+) events=(\d+) rejected=(\d+) "
    r"no_valid_rows=(\d+) fallback_uploads=(\d+) elapsed_sec=[0-9.]+$",
    re.MULTILINE,
)


@pytest.fixture
def multi_file_setup(temp_workdir: Path, write_config: Any, workbook) -> Path:
    data_dir = temp_workdir / "data"
    workbook(
        data_dir / "cgc-101.xlsx",
        [
            ["Pozo", "Prof_Desde (m)", "Subcategoria_NPT", "Comentario"],
            ["CGC-101", "1.500,50", "PERFORACION", None],
            ["CGC-101", "2,900.00", "PESCA", "herramienta atrapada"],
            ["CGC-101", "3100 m", None, None],
        ],
    )
    workbook(
        data_dir / "cgc-102.xlsx",
        [
            ["Well", "Depth", "Detalle_NPT", "Observaciones"],
            ["CGC-102", 800, "CEMENTACION", "ok"],
            [None, 900, "CEMENTACION", "sin pozo"],
        ],
        sheet_name="Sheet1",
    )
    return data_dir


def test_success_run(multi_file_setup: Path, no_db, temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out

    assert code == 0
    m = SUMMARY_RE.search(out)
    assert m, out
    files, success, failed, events, rejected, no_valid, fallback = (int(g) for g in m.groups())
    assert (files, success, failed) == (2, 2, 0)
    assert events == 4
    assert rejected == 1
    assert no_valid == 0
    assert fallback == 0
    assert "source=cgc-101.xlsx accepted=3 rejected=0" in out

    # the rejected row is in the JSON Lines error log
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    text = logs[0].read_text(encoding="utf-8")
    assert '"file": "cgc-102.xlsx"' in text
    # sheet row: header is row 1, CGC-102 row 2
    assert '"row": 3' in text


def test_wrong_headers_reported_as_no_valid_rows(temp_workdir: Path, write_config: Any, no_db, workbook, capsys):
    workbook(temp_workdir / "data" / "resumen.xlsx", [["Fecha", "Turno"], ["2024-03-01", "Noche"]])
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "WARN source=resumen.xlsx no valid rows" in out
    assert "no_valid_rows=1" in out
