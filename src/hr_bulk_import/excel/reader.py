from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Spreadsheet reader for bulk employee upload.

First sheet only; row 1 is the header, every following non-empty row is a
data row. Missing cells become "" (never absent keys) so every RawRow carries
the full header set.

.xlsx は openpyxl、.xls は xlrd、.csv は pandas 標準パーサで読む。
"""

__all__ = [
    "SUPPORTED_SUFFIXES",
    "SheetData",
    "SpreadsheetParseError",
    "SheetHeaderError",
    "read_spreadsheet",
    "normalize_sheet",
]

SUPPORTED_SUFFIXES = {".xlsx": "openpyxl", ".xls": "xlrd", ".csv": None}


class SpreadsheetParseError(Exception):
    """Raised when the uploaded file cannot be decoded into rows."""


class SheetHeaderError(SpreadsheetParseError):
    """Raised when the header row (1st line) is missing or blank."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, Any]]  # header -> cell value, "" for empty cells


def _header_names(raw_headers: list[Any]) -> list[str]:
    """Stringify header cells; blank ones get pandas-style names, duplicates a suffix."""
    names: list[str] = []
    used: set[str] = set()
    suffix: dict[str, int] = {}
    for idx, cell in enumerate(raw_headers):
        base = "" if pd.isna(cell) else str(cell).strip()
        if not base:
            base = f"Unnamed: {idx}"
        name = base
        while name in used:
            suffix[base] = suffix.get(base, 0) + 1
            name = f"{base}_{suffix[base]}"
        used.add(name)
        names.append(name)
    return names


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Turn a header-less raw DataFrame into header-keyed rows.

    Steps:
    1. Validate the first row exists and is not entirely blank
    2. Use it as header (stripped, de-duplicated)
    3. Skip data rows whose cells are all empty
    4. Replace NaN with "" and strip string cells
    """
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    header_series = df.iloc[0]
    if all(pd.isna(v) or str(v).strip() == "" for v in header_series.tolist()):
        raise SheetHeaderError(f"sheet '{sheet_name}' header row is blank")
    columns = _header_names(header_series.tolist())

    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[1:].iterrows():
        values = raw.tolist()
        if all(pd.isna(v) or (isinstance(v, str) and v.strip() == "") for v in values):
            continue
        row_dict: dict[str, Any] = {}
        for col, val in zip(columns, values, strict=False):
            if pd.isna(val):
                row_dict[col] = ""
            elif isinstance(val, str):
                row_dict[col] = val.strip()
            else:
                row_dict[col] = val
        rows.append(row_dict)
    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def read_spreadsheet(path: Path) -> SheetData:
    """Read the first sheet of an .xlsx/.xls/.csv file.

    Raises:
        SpreadsheetParseError: unsupported type, missing/unreadable file, no header
    """
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise SpreadsheetParseError(
            f"unsupported file type '{suffix or path.name}' (expected .xlsx, .xls or .csv)"
        )
    if not path.is_file():
        raise SpreadsheetParseError(f"file not found: {path}")

    try:
        if suffix == ".csv":
            sheet_name = path.stem
            df = pd.read_csv(path, header=None, dtype=object, skip_blank_lines=False)
        else:
            with pd.ExcelFile(path, engine=SUPPORTED_SUFFIXES[suffix]) as xls:
                if not xls.sheet_names:
                    raise SheetHeaderError(f"workbook '{path.name}' has no sheets")
                sheet_name = str(xls.sheet_names[0])
                df = xls.parse(sheet_name, header=None, dtype=object)
    except SpreadsheetParseError:
        raise
    except Exception as e:  # pandas / openpyxl / xlrd raise a wide range of types
        raise SpreadsheetParseError(f"failed to read '{path.name}': {e}") from e

    return normalize_sheet(df, sheet_name)
