"""
import_engine.sheet_reader - Excel workbook reading via pandas.

Only the first sheet is read.  Its first row supplies the keys; every
following non-blank row becomes one dict with "" for empty cells.
"""

from __future__ import annotations

import io

import pandas as pd

_ENGINES = {
    ".xlsx": "openpyxl",
    ".xls":  "xlrd",
}


def read_sheet_rows(raw: bytes, ext: str) -> list[dict]:
    df = pd.read_excel(
        io.BytesIO(raw),
        sheet_name=0,
        header=0,
        dtype=object,
        engine=_ENGINES.get(ext),
    )
    df = df.dropna(how="all")
    if df.empty:
        return []

    df.columns = [_column_name(c, i) for i, c in enumerate(df.columns)]
    df = df.astype(object).where(pd.notna(df), "")
    return df.to_dict(orient="records")


def _column_name(col, idx: int) -> str:
    # pandas labels blank header cells "Unnamed: N"
    name = str(col).strip()
    if not name or name.startswith("Unnamed:"):
        return f"__empty_{idx}"
    return name
