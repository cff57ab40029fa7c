"""
import_engine.importer - Non-interactive, top-to-bottom import.

Coordinates ingestor → batch importer without an operator: every
parsed row is selected and the batch runs to completion.  Used for
seeding an empty database at start-up and for scripted imports.
"""

from __future__ import annotations

import asyncio

from import_engine.batch import BatchImporter, Completed, InsertOperation
from import_engine.ingestor import parse_import_file
from import_engine.report import ImportResult


def run_import(
    file_content: str | bytes,
    filename: str,
    insert_op: InsertOperation,
) -> tuple[ImportResult, Completed]:
    """
    Parse a file and commit all of its rows.

    Parameters
    ----------
    file_content : raw file content
    filename     : used for extension detection
    insert_op    : capability that persists rows (see import_engine.batch)

    Returns
    -------
    (ImportResult with per-row warnings, terminal session state)
    """
    result = parse_import_file(file_content, filename)
    if not result.rows:
        return result, Completed(imported_count=0, total=0, errors=result.errors)

    importer = BatchImporter(insert_op)
    state = asyncio.run(importer.start(result.rows))
    return result, state
