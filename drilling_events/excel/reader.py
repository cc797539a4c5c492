from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO

import pandas as pd

"""Spreadsheet reader.

Decodes the first sheet of a workbook into header -> value rows:

- first row is the header (headers are kept as written, only stripped)
- fully empty rows are skipped; row_numbers keeps the sheet row (header = 1)
  of every returned row so errors point at what the operator sees
- empty cells become None
- cells keep their native type (dtype=object) so numeric well names and
  depths are not coerced to float by neighbouring blanks

Anything pandas/openpyxl cannot decode is reported as SheetReadError; callers
treat that as fatal for the upload and never see partial rows.
"""

__all__ = [
    "SheetData",
    "SheetReadError",
    "read_first_sheet",
]


class SheetReadError(Exception):
    """Raised when the workbook bytes cannot be decoded."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # header -> value, sheet column order
    row_numbers: list[int] = field(default_factory=list)  # 1-based sheet row of each entry in rows


def _open_source(source: Path | str | bytes | BinaryIO) -> Any:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return source


def read_first_sheet(source: Path | str | bytes | BinaryIO) -> SheetData:
    """Read the first sheet of a workbook.

    Parameters
    ----------
    source: file path, raw workbook bytes or a binary file object
    """
    if isinstance(source, (str, Path)) and not Path(source).exists():
        raise SheetReadError(f"file not found: {source}")
    try:
        xls = pd.ExcelFile(_open_source(source))
        if not xls.sheet_names:
            raise SheetReadError("workbook has no sheets")
        sheet_name = str(xls.sheet_names[0])
        df = xls.parse(xls.sheet_names[0], header=0, dtype=object)
    except SheetReadError:
        raise
    except Exception as e:
        raise SheetReadError(f"unreadable workbook: {e}") from e

    columns = [str(c).strip() for c in df.columns]
    rows: list[dict[str, Any]] = []
    row_numbers: list[int] = []
    for position, (_, raw) in enumerate(df.iterrows()):
        if raw.isna().all():
            continue
        # +1 for 1-based rows, +1 for the header
        row_numbers.append(position + 2)
        row_dict: dict[str, Any] = {}
        for col, val in zip(columns, raw.tolist(), strict=False):
            row_dict[col] = None if pd.isna(val) else val
        rows.append(row_dict)
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows, row_numbers=row_numbers)
