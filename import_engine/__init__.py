"""
import_engine - File import pipeline.

Public API:
    parse_import_file(content, filename) → ImportResult
    ImportPreview(result)                → row selection over a result
    BatchImporter(insert_op, discard_op) → resumable, cancelable commit
    ImportFlow(insert_op, discard_op)    → the whole operator-driven flow
    run_import(content, filename, insert_op) → unattended import
"""

from import_engine.report import ImportedRow, ImportResult, Status            # noqa: F401
from import_engine.ingestor import (                                           # noqa: F401
    get_file_extension,
    parse_import_file,
    validate_file_extension,
)
from import_engine.preview import ImportPreview                               # noqa: F401
from import_engine.batch import (                                             # noqa: F401
    BatchImporter,
    Completed,
    Idle,
    ImportProgress,
    ImportStage,
    ImportStateError,
    Paused,
    Running,
    run_sequential_insert,
)
from import_engine.flow import FlowStage, ImportFlow                          # noqa: F401
from import_engine.importer import run_import                                 # noqa: F401
