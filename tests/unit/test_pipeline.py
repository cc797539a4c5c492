from __future__ import annotations

import logging

import pytest

from drilling_events.excel.reader import SheetReadError
from drilling_events.logging.error_log import ErrorLogBuffer
from drilling_events.models.field_spec import build_field_specs
from drilling_events.models.ingest_result import IngestStatus, RejectReason
from drilling_events.services.pipeline import ingest, ingest_file


def _row(well="CGC-101", depth="100", sub="PERFORACION", comment=None):
    return {"Pozo": well, "prof_desde": depth, "subcategoria_npt": sub, "comentario": comment}


def test_empty_input_is_not_an_error():
    result = ingest([])
    assert result.events == ()
    assert result.diagnostics.status is IngestStatus.EMPTY_INPUT
    assert result.diagnostics.total_rows == 0
    assert not result.diagnostics.no_valid_rows


def test_accepted_rows_keep_sheet_order():
    rows = [_row(depth="300"), _row(depth="100"), _row(depth="200")]
    result = ingest(rows)
    assert [e.depth for e in result.events] == [300.0, 100.0, 200.0]
    assert result.diagnostics.status is IngestStatus.OK
    assert result.diagnostics.resolved_columns["well"] == "Pozo"


def test_uploaded_rows_are_not_deduplicated():
    rows = [_row(), _row()]
    result = ingest(rows)
    assert len(result.events) == 2
    assert result.events[0].id != result.events[1].id


def test_row_without_well_adds_exactly_one_rejection():
    base = [_row(depth="1"), _row(depth="2")]
    before = ingest(base).diagnostics.rejected_rows
    after = ingest(base + [_row(well=None, depth="3")]).diagnostics
    assert after.rejected_rows == before + 1
    assert after.accepted_rows == 2
    assert after.total_rows == 3
    assert after.rejections[0].reason is RejectReason.MISSING_WELL
    assert after.rejections[0].row_index == 2


def test_cardinality_invariant():
    rows = [_row(), _row(well=""), _row(depth="-1"), _row(well=None), _row(depth="5 m")]
    diag = ingest(rows).diagnostics
    assert diag.accepted_rows + diag.rejected_rows == diag.total_rows == 5
    assert diag.accepted_rows == 2


def test_all_rows_rejected_flags_no_valid_rows(caplog):
    caplog.set_level(logging.INFO)
    rows = [{"Fecha": "2024-01-01", "Turno": "A"}, {"Fecha": "2024-01-02", "Turno": "B"}]
    result = ingest(rows, source_name="bad.xlsx")
    assert result.events == ()
    assert result.diagnostics.status is IngestStatus.NO_VALID_ROWS
    assert result.diagnostics.no_valid_rows
    assert result.diagnostics.rejected_rows == 2
    assert "no well column found" in caplog.text
    assert "no valid rows" in caplog.text
    assert "pozo" in caplog.text


def test_headers_resolved_from_first_row_only():
    rows = [{"Pozo": "A", "prof_desde": 1}, {"Well": "B", "prof_desde": 2}]
    result = ingest(rows)
    assert [e.well for e in result.events] == ["A"]
    assert result.diagnostics.rejected_rows == 1


def test_rejections_go_to_error_log(tmp_path):
    buffer = ErrorLogBuffer(logs_dir=tmp_path)
    ingest([_row(), _row(well=None), _row(depth="-3")], error_log=buffer, source_name="pozos.xlsx")
    records = buffer.records
    assert [(r.file, r.row, r.error_type) for r in records] == [
        ("pozos.xlsx", 2, "MISSING_WELL"),
        ("pozos.xlsx", 3, "NEGATIVE_DEPTH"),
    ]
    assert records[0].message == "missing well"


def test_custom_field_specs_and_default_subcategory():
    specs = build_field_specs({"well": ["sondeo"]})
    rows = [{"Sondeo": "S-1", "Depth": "1,200.5"}]
    result = ingest(rows, field_specs=specs, default_subcategory="Sin dato")
    event = result.events[0]
    assert (event.well, event.depth, event.subcategory) == ("S-1", 1200.5, "Sin dato")


def test_ingest_file_reads_first_sheet(tmp_path, workbook):
    path = workbook(
        tmp_path / "eventos.xlsx",
        [
            ["Pozo", "Prof_Desde", "Subcategoria_NPT", "Comentario"],
            ["CGC-101", "1.500,50", "PERFORACION", None],
            ["CGC-101", 1750, "PESCA", "cable cortado"],
        ],
    )
    result = ingest_file(path)
    assert [(e.well, e.depth, e.subcategory, e.comment) for e in result.events] == [
        ("CGC-101", 1500.5, "PERFORACION", ""),
        ("CGC-101", 1750.0, "PESCA", "cable cortado"),
    ]


def test_ingest_file_accepts_bytes(tmp_path, workbook):
    path = workbook(tmp_path / "e.xlsx", [["well", "depth"], ["W-1", 10]])
    result = ingest_file(path.read_bytes())
    assert result.events[0].well == "W-1"


def test_ingest_file_unreadable_raises(tmp_path):
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"not a workbook")
    with pytest.raises(SheetReadError):
        ingest_file(path)


def test_blank_default_subcategory_rejected():
    with pytest.raises(ValueError, match="default_subcategory"):
        ingest([_row()], default_subcategory="   ")


def test_default_subcategory_trimmed():
    result = ingest([_row(sub=None)], default_subcategory="  Sin dato ")
    assert result.events[0].subcategory == "Sin dato"


def test_row_numbers_length_must_match():
    with pytest.raises(ValueError, match="row_numbers"):
        ingest([_row(), _row()], row_numbers=[2])


def test_error_log_uses_sheet_row_numbers(tmp_path, workbook):
    path = workbook(
        tmp_path / "pozos.xlsx",
        [
            ["Pozo", "Prof_Desde"],
            ["CGC-1", 100],
            [None, None],
            [None, 300],
        ],
    )
    buffer = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    result = ingest_file(path, error_log=buffer)
    assert result.diagnostics.rejected_rows == 1
    # header is sheet row 1, the blank row 3 is skipped by the reader
    assert [(r.file, r.row) for r in buffer.records] == [("pozos.xlsx", 4)]
