"""
services - Business-logic layer sitting between API and DB.
"""

from services.entries_service import (                                  # noqa: F401
    EntriesService,
    make_discard_operation,
    make_insert_operation,
)
from services.import_runner import FlowNotFound, ImportRunner            # noqa: F401
