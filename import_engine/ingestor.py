"""
import_engine.ingestor - Turn an uploaded file into an ImportResult.

Dispatches on the file extension to the text, CSV or spreadsheet
reader.  Nothing raised while reading leaves this module: every
failure becomes a single displayable error inside an empty result.
"""

from __future__ import annotations

import logging

from import_engine.csv_parser import parse_text, read_csv_rows
from import_engine.field_map import SPREADSHEET_EXTENSIONS, SUPPORTED_EXTENSIONS
from import_engine.report import ImportResult
from import_engine.row_processor import rows_to_result
from import_engine.sheet_reader import read_sheet_rows

logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "O arquivo está vazio ou sem dados válidos."


def get_file_extension(filename: str) -> str:
    """Lower-cased extension including the dot ("" when there is none)."""
    idx = filename.rfind(".")
    if idx < 0:
        return ""
    return filename[idx:].lower()


def validate_file_extension(filename: str) -> bool:
    return get_file_extension(filename) in SUPPORTED_EXTENSIONS


def unsupported_message(ext: str) -> str:
    return f"Formato não suportado: {ext}. Use .xlsx, .xls, .csv ou .txt"


def parse_import_file(content: bytes | str, filename: str) -> ImportResult:
    """
    Parse one import file.

    Parameters
    ----------
    content  : raw file content
    filename : name as declared by the uploader; only its extension is used

    Returns
    -------
    ImportResult; never raises for bad input
    """
    ext = get_file_extension(filename)
    if not validate_file_extension(filename):
        return ImportResult.failure(unsupported_message(ext))

    try:
        if ext == ".txt":
            return parse_text(content)

        if ext in SPREADSHEET_EXTENSIONS:
            if isinstance(content, str):
                content = content.encode("utf-8")
            raw_rows = read_sheet_rows(content, ext)
        else:
            raw_rows = read_csv_rows(content)

        if not raw_rows:
            return ImportResult.failure(EMPTY_FILE_MESSAGE)

        result = rows_to_result(raw_rows)
    except Exception as exc:
        logger.warning(f"Failed to parse {filename!r}: {exc}")
        return ImportResult.failure(
            f"Erro ao processar arquivo: {str(exc) or 'Erro desconhecido'}"
        )

    logger.info(
        f"Parsed {filename!r}: {len(result.rows)} rows, {len(result.errors)} skipped"
    )
    return result
