"""
import_engine.flow - One operator-driven import, from file choice to summary.

Stages:
    SELECT     no file loaded
    PREVIEW    file parsed, operator picking rows
    IMPORTING  batch running
    PAUSED     batch stopped at a row boundary, awaiting a decision
    DONE       batch finished (fully, partially or with an error)
"""

from __future__ import annotations

import enum
import logging
from typing import Optional

import config
from import_engine.batch import (
    BatchImporter,
    Completed,
    DiscardOperation,
    ImportStage,
    ImportStateError,
    InsertOperation,
    Paused,
)
from import_engine.ingestor import parse_import_file, validate_file_extension
from import_engine.preview import ImportPreview
from import_engine.report import ImportResult

logger = logging.getLogger(__name__)


class FlowStage(str, enum.Enum):
    SELECT = "SELECT"
    PREVIEW = "PREVIEW"
    IMPORTING = "IMPORTING"
    PAUSED = "PAUSED"
    DONE = "DONE"


_BATCH_TO_FLOW = {
    ImportStage.RUNNING:   FlowStage.IMPORTING,
    ImportStage.PAUSED:    FlowStage.PAUSED,
    ImportStage.COMPLETED: FlowStage.DONE,
}


class ImportFlow:

    def __init__(
        self,
        insert_op: InsertOperation,
        discard_op: Optional[DiscardOperation] = None,
        type_label: str = "itens",
        page_size: int = config.PREVIEW_PAGE_SIZE,
    ):
        self.type_label = type_label
        self.page_size = page_size
        self.preview: Optional[ImportPreview] = None
        self.filename: Optional[str] = None
        self.importer = BatchImporter(insert_op, discard_op)

    @property
    def result(self) -> Optional[ImportResult]:
        return self.preview.result if self.preview else None

    @property
    def stage(self) -> FlowStage:
        if self.preview is None:
            return FlowStage.SELECT
        return _BATCH_TO_FLOW.get(self.importer.stage, FlowStage.PREVIEW)

    # ── File selection ─────────────────────────────────────────────────

    def load_file(self, content: bytes | str, filename: str) -> ImportResult:
        """Parse a newly chosen file, replacing any previous one."""
        self.close()
        if not validate_file_extension(filename):
            result = ImportResult.failure("Formato não suportado. Use .xlsx, .xls, .csv ou .txt")
        else:
            result = parse_import_file(content, filename)
        self.filename = filename
        self.preview = ImportPreview(result, page_size=self.page_size)
        return result

    def back(self) -> None:
        """Return to file selection, dropping the parsed file and its selection."""
        if self.stage not in (FlowStage.SELECT, FlowStage.PREVIEW):
            raise ImportStateError(f"cannot go back while {self.stage.value}")
        self.preview = None
        self.filename = None

    # ── Import ─────────────────────────────────────────────────────────

    async def confirm_import(self) -> bool:
        """Start importing the selected rows.  No-op (False) on an empty selection."""
        if self.preview is None or not self.preview.can_import:
            return False
        rows = self.preview.selected_rows()
        logger.info(f"Importing {len(rows)} {self.type_label} from {self.filename!r}")
        await self.importer.start(rows)
        return True

    def request_pause(self) -> bool:
        return self.importer.request_cancel()

    async def resume(self) -> None:
        await self.importer.resume()

    def keep_imported(self) -> None:
        self.importer.keep_imported()

    async def discard_all(self) -> None:
        await self.importer.discard_all()

    def close(self) -> None:
        """Leave the flow: nothing survives to the next file."""
        self.importer.reset()
        self.preview = None
        self.filename = None

    # ── Presentation ───────────────────────────────────────────────────

    def summary(self) -> Optional[str]:
        state = self.importer.state
        if isinstance(state, Paused):
            return (f"Importação pausada: {state.committed_count} de {state.total} "
                    f"{self.type_label} importado(s).")
        if not isinstance(state, Completed):
            return None
        if state.failed:
            return "Erro durante importação: " + "; ".join(state.errors)
        msg = f"{state.imported_count} {self.type_label} importado(s) com sucesso!"
        if state.partial:
            msg += f" {state.left_out} não importado(s)."
        return msg

    def snapshot(self, page: int = 1) -> dict:
        """JSON-ready view of the whole flow."""
        data: dict = {
            "stage": self.stage.value,
            "filename": self.filename,
            "type_label": self.type_label,
            "progress": self.importer.progress.to_dict(),
            "session": self.importer.state.to_dict(),
            "summary": self.summary(),
        }
        if self.preview is not None:
            result = self.preview.result
            data.update({
                "row_count": self.preview.row_count,
                "selected_count": len(self.preview.selected),
                "all_selected": self.preview.all_selected,
                "can_import": self.preview.can_import,
                "headers": list(result.headers),
                "errors": list(result.errors),
                "preview": self.preview.page_dict(page),
            })
        return data
