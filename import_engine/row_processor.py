"""
import_engine.row_processor - Validate and transform one raw row into an ImportedRow.

Single-responsibility: given a dict-row keyed by the file's own headers,
either return an ImportedRow or raise RowError.  Every field except the
title degrades to a safe default instead of rejecting the row.
"""

from __future__ import annotations

import logging
import math
import re
import unicodedata
from typing import Any, Iterable, Optional

from import_engine.field_map import HEADER_MAP, KNOWN_FIELDS, STATUS_MAP
from import_engine.report import ImportedRow, ImportResult, Status

logger = logging.getLogger(__name__)

_GENRE_SPLIT = re.compile(r"[,;|]")
# Plain decimal notation only; float() would also take "1_0", "inf", "nan"
_NUMBER = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class RowError(Exception):
    """Raised when a row cannot be imported."""
    pass


# ── Field normalisers ──────────────────────────────────────────────────

def strip_accents(text: str) -> str:
    nfd = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in nfd if unicodedata.category(ch) != "Mn")


def normalize_header(header: Any) -> str:
    """
    Map a file header to its canonical field name.

    Unknown headers come back trimmed and lower-cased so they can be
    carried as opaque extra fields.
    """
    lowered = str(header).strip().lower()
    clean = strip_accents(lowered)
    return HEADER_MAP.get(clean) or HEADER_MAP.get(lowered) or lowered


def normalize_status(value: Any) -> Status:
    if value is None:
        return Status.PENDING
    return Status(STATUS_MAP.get(str(value).strip().lower(), "PENDING"))


def parse_rating(value: Any) -> Optional[float]:
    """
    Parse a 0-10 rating.  Accepts "9,5" as well as "9.5".

    Non-numeric input means "no rating" (None), never 0.
    """
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    text = text.replace(",", ".", 1)
    if not _NUMBER.fullmatch(text):
        return None
    clamped = min(10.0, max(0.0, float(text)))
    return math.floor(clamped * 10 + 0.5) / 10


def parse_genres(value: Any) -> Optional[tuple[str, ...]]:
    """Split a genre cell; None when the cell is empty."""
    text = _clean_text(value)
    if not text:
        return None
    tokens = (g.strip() for g in _GENRE_SPLIT.split(text))
    return tuple(g for g in tokens if g)


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    return str(value) != ""


def _clean_text(value: Any) -> Optional[str]:
    if not _has_value(value):
        return None
    return str(value).strip()


# ── Row processor ──────────────────────────────────────────────────────

class RowProcessor:
    """
    Normalises rows of one file.  Headers are resolved once in the
    constructor since every row of a file shares them.
    """

    def __init__(self, headers: Iterable[Any]):
        self.headers = list(headers)
        self.keys = [normalize_header(h) for h in self.headers]

    def process(self, raw: dict) -> ImportedRow:
        """Build an ImportedRow from one raw row.  Raises RowError on an empty title."""
        mapped: dict[str, Any] = {}
        for header, key in zip(self.headers, self.keys):
            mapped[key] = raw.get(header)

        title = _clean_text(mapped.get("title")) or ""
        if not title:
            raise RowError("título vazio")

        status = mapped.get("status")
        extra = {
            k: str(v).strip()
            for k, v in mapped.items()
            if k not in KNOWN_FIELDS and _has_value(v) and str(v).strip()
        }
        return ImportedRow(
            title=title,
            status=normalize_status(status) if _has_value(status) else Status.PENDING,
            rating=parse_rating(mapped.get("rating")),
            platform=_clean_text(mapped.get("platform")) or None,
            genres=parse_genres(mapped.get("genres")),
            author=_clean_text(mapped.get("author")) or None,
            isbn=_clean_text(mapped.get("isbn")) or None,
            synopsis=_clean_text(mapped.get("synopsis")) or None,
            extra=extra,
        )


def rows_to_result(raw_rows: list[dict]) -> ImportResult:
    """
    Normalise every raw row of a file.

    Rows are reported with spreadsheet numbering: data row i (0-based)
    sits on line i + 2 because line 1 is the header.
    """
    headers = list(raw_rows[0].keys()) if raw_rows else []
    processor = RowProcessor(headers)

    rows: list[ImportedRow] = []
    errors: list[str] = []
    for row_idx, raw in enumerate(raw_rows, start=2):   # row 1 = header
        try:
            rows.append(processor.process(raw))
        except RowError:
            logger.debug(f"Skipping line {row_idx}: empty title")
            errors.append(f"Linha {row_idx}: título vazio, ignorada.")

    return ImportResult(rows=tuple(rows), headers=tuple(processor.keys), errors=tuple(errors))
