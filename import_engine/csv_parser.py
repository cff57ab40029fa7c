"""
import_engine.csv_parser - Low-level reading of delimited text.

Responsibilities:
  • Decoding (UTF-8 with or without BOM, Windows-1252 fallback)
  • Delimiter detection (comma, semicolon, tab)
  • Header whitespace stripping
  • Plain .txt lists, with or without a header line
"""

from __future__ import annotations

import csv
import io
import re
from typing import Optional

from import_engine.field_map import TXT_HEADER_MARKERS
from import_engine.report import ImportedRow, ImportResult, Status
from import_engine.row_processor import normalize_header, rows_to_result

CSV_DELIMITERS = ",;\t"
TEXT_ENCODINGS = ("utf-8-sig", "cp1252")

_LINE_SPLIT = re.compile(r"\r?\n")


def prepare_reader(raw: str | bytes) -> Optional[csv.DictReader]:
    """
    Accept raw file content (bytes or str), clean it,
    and return a DictReader.  Returns None if content is empty.
    """
    text = decode(raw)
    if not text or not text.strip():
        return None

    reader = csv.DictReader(io.StringIO(text), delimiter=_sniff_delimiter(text))
    if reader.fieldnames is None:
        return None

    # Strip whitespace from every header
    reader.fieldnames = [h.strip() for h in reader.fieldnames]
    return reader


def read_csv_rows(raw: str | bytes) -> list[dict]:
    """Return every data row as a dict keyed by the file's own headers."""
    reader = prepare_reader(raw)
    if reader is None:
        return []
    rows = []
    for row in reader:
        # Short rows leave None values, long rows spill into the None key
        clean = {k: (v if v is not None else "") for k, v in row.items() if k is not None}
        if any(str(v).strip() for v in clean.values()):
            rows.append(clean)
    return rows


def parse_text(raw: str | bytes) -> ImportResult:
    """
    Parse a .txt import.

    The first non-blank line decides both the separator and whether
    the file has a header.  Without a recognisable header every line
    is one title.
    """
    text = decode(raw)
    lines = [line for line in _LINE_SPLIT.split(text) if line.strip()]
    if not lines:
        return ImportResult.failure("Arquivo vazio.")

    first = lines[0]
    separator = detect_separator(first)
    headers = [h.strip() for h in first.split(separator)]

    normalized = [normalize_header(h) for h in headers]
    if not any(h in TXT_HEADER_MARKERS for h in normalized):
        rows = tuple(
            ImportedRow(title=line.strip(), status=Status.PENDING)
            for line in lines
            if line.strip()
        )
        return ImportResult(rows=rows, headers=("title",))

    raw_rows = []
    for line in lines[1:]:
        values = line.split(separator)
        raw_rows.append({
            h: (values[i].strip() if i < len(values) else "")
            for i, h in enumerate(headers)
        })
    if not raw_rows:
        return ImportResult(headers=tuple(normalized))
    return rows_to_result(raw_rows)


def detect_separator(line: str) -> str:
    """Tab, then semicolon, then comma; tab when none is present."""
    for sep in ("\t", ";", ","):
        if sep in line:
            return sep
    return "\t"


def decode(raw: str | bytes) -> str:
    """
    UTF-8 (BOM stripped) first, then Windows-1252 as written by Excel's
    CSV export.  Bytes undefined in both raise UnicodeDecodeError.
    """
    if isinstance(raw, str):
        return raw[1:] if raw.startswith("\ufeff") else raw
    for enc in TEXT_ENCODINGS[:-1]:
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode(TEXT_ENCODINGS[-1])


def _sniff_delimiter(text: str) -> str:
    """Pick the delimiter appearing most often in the header line (comma on ties)."""
    header = _LINE_SPLIT.split(text, maxsplit=1)[0]
    counts = {d: header.count(d) for d in CSV_DELIMITERS}
    best = max(CSV_DELIMITERS, key=lambda d: counts[d])
    return best if counts[best] else ","
