"""
import_engine.batch - Resumable, cancelable batch commit of imported rows.

The importer never talks to a database itself.  It is handed two
capabilities at construction time:

    insert_op(rows, on_progress, cancel_flag) -> list of new ids
    discard_op(ids) -> None                       (optional)

insert_op must commit rows one at a time, in order, check cancel_flag
before each row and call on_progress after each committed row.
run_sequential_insert() implements that contract on top of a
single-row insert.

Session states:

    IDLE → RUNNING → COMPLETED
                   → PAUSED → RUNNING      (resume)
                            → COMPLETED    (keep imported / discard all)
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, ClassVar, Optional, Sequence, Union

from import_engine.report import ImportedRow

logger = logging.getLogger(__name__)


class ImportStateError(RuntimeError):
    """Raised when an operation is not allowed in the current session state."""
    pass


@dataclass(frozen=True)
class ImportProgress:
    current: int = 0
    total: int = 0
    percent: int = 0

    @classmethod
    def of(cls, current: int, total: int) -> "ImportProgress":
        percent = math.floor(current / total * 100 + 0.5) if total else 0
        return cls(current=current, total=total, percent=percent)

    def to_dict(self) -> dict:
        return {"current": self.current, "total": self.total, "percent": self.percent}


ProgressCallback = Callable[[ImportProgress], None]
InsertOperation = Callable[
    [Sequence[ImportedRow], ProgressCallback, threading.Event], Awaitable[list]
]
DiscardOperation = Callable[[list], Awaitable[None]]


# ── Session states ─────────────────────────────────────────────────────

class ImportStage(str, enum.Enum):
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class Idle:
    stage: ClassVar[ImportStage] = ImportStage.IDLE

    def to_dict(self) -> dict:
        return {"stage": self.stage.value}


@dataclass(frozen=True)
class Running:
    start_from: int          # rows committed by earlier runs of this session
    total: int               # size of the whole selection
    stage: ClassVar[ImportStage] = ImportStage.RUNNING

    def to_dict(self) -> dict:
        return {"stage": self.stage.value, "start_from": self.start_from, "total": self.total}


@dataclass(frozen=True)
class Paused:
    committed_count: int
    total: int
    inserted_ids: tuple = ()
    stage: ClassVar[ImportStage] = ImportStage.PAUSED

    @property
    def remaining(self) -> int:
        return self.total - self.committed_count

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "committed_count": self.committed_count,
            "total": self.total,
            "remaining": self.remaining,
        }


@dataclass(frozen=True)
class Completed:
    imported_count: int
    total: int
    partial: bool = False
    errors: tuple[str, ...] = ()
    stage: ClassVar[ImportStage] = ImportStage.COMPLETED

    @property
    def failed(self) -> bool:
        return bool(self.errors)

    @property
    def left_out(self) -> int:
        return self.total - self.imported_count if self.partial else 0

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "imported_count": self.imported_count,
            "total": self.total,
            "partial": self.partial,
            "left_out": self.left_out,
            "errors": list(self.errors),
        }


SessionState = Union[Idle, Running, Paused, Completed]


# ── Insert-operation helper ────────────────────────────────────────────

async def run_sequential_insert(
    rows: Sequence[ImportedRow],
    insert_one: Callable[[ImportedRow], Awaitable[Any]],
    on_progress: ProgressCallback,
    cancel_flag: threading.Event,
) -> list:
    """
    Insert rows one by one through insert_one and return the new ids.

    The flag is read only between rows, so a row already in flight
    always completes.
    """
    ids: list = []
    total = len(rows)
    for row in rows:
        if cancel_flag.is_set():
            break
        ids.append(await insert_one(row))
        on_progress(ImportProgress.of(len(ids), total))
        # Let pause requests and progress readers in between rows
        await asyncio.sleep(0)
    return ids


# ── Batch importer ─────────────────────────────────────────────────────

class BatchImporter:
    """
    Owns one import session: the queued rows, the committed count, the
    ids inserted so far and the cancellation flag.

    Only one run is active at a time; start() and resume() refuse to
    run while a previous run has not returned.
    """

    def __init__(
        self,
        insert_op: InsertOperation,
        discard_op: Optional[DiscardOperation] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self._insert_op = insert_op
        self._discard_op = discard_op
        self._listener = on_progress
        self._generation = 0
        self.cancel_flag = threading.Event()
        self.reset()

    # ── Read-only views ────────────────────────────────────────────────

    @property
    def stage(self) -> ImportStage:
        return self.state.stage

    @property
    def inserted_ids(self) -> tuple:
        return tuple(self._inserted_ids)

    @property
    def committed_count(self) -> int:
        return self._committed

    @property
    def total(self) -> int:
        return len(self._rows)

    # ── Transitions ────────────────────────────────────────────────────

    async def start(self, rows: Sequence[ImportedRow]) -> SessionState:
        """IDLE → RUNNING over the full selection."""
        if not isinstance(self.state, Idle):
            raise ImportStateError(f"cannot start an import while {self.stage.value}")
        rows = tuple(rows)
        if not rows:
            raise ImportStateError("no rows selected")
        self._rows = rows
        await self._commit(rows, start_from=0)
        return self.state

    def request_cancel(self) -> bool:
        """
        Ask the running insert operation to stop at the next row boundary.
        Returns False when nothing is running.
        """
        if not isinstance(self.state, Running):
            return False
        self.cancel_flag.set()
        logger.info(f"Cancellation requested at {self.progress.current}/{self.progress.total}")
        return True

    async def resume(self) -> SessionState:
        """PAUSED → RUNNING with the rows not committed yet."""
        paused = self._require_paused("resume")
        remaining = self._rows[paused.committed_count:]
        if not remaining:
            self.state = Completed(imported_count=paused.committed_count, total=paused.total)
            return self.state
        await self._commit(remaining, start_from=paused.committed_count)
        return self.state

    def keep_imported(self) -> SessionState:
        """PAUSED → COMPLETED, accepting the rows committed so far."""
        paused = self._require_paused("keep imported rows")
        self.state = Completed(
            imported_count=paused.committed_count, total=paused.total, partial=True,
        )
        return self.state

    async def discard_all(self) -> SessionState:
        """
        PAUSED → COMPLETED after deleting everything this session inserted.
        A failing discard operation is logged; the session still completes.
        """
        paused = self._require_paused("discard")
        ids = list(self._inserted_ids)
        if self._discard_op is not None and ids:
            try:
                await self._discard_op(ids)
                logger.info(f"Discarded {len(ids)} imported rows")
            except Exception as exc:
                logger.warning(f"Discarding {len(ids)} imported rows failed: {exc}")
        self._inserted_ids.clear()
        self._committed = 0
        self.state = Completed(imported_count=0, total=paused.total, partial=True)
        return self.state

    def reset(self) -> None:
        """Drop the whole session.  A run still in flight is told to stop and its result ignored."""
        self.cancel_flag.set()
        self._generation += 1
        self.cancel_flag = threading.Event()
        self.state: SessionState = Idle()
        self.progress = ImportProgress()
        self._rows: tuple[ImportedRow, ...] = ()
        self._inserted_ids: list = []
        self._committed = 0

    # ── Private helpers ────────────────────────────────────────────────

    async def _commit(self, pending: Sequence[ImportedRow], start_from: int) -> None:
        total = len(self._rows)
        generation = self._generation
        cancel_flag = self.cancel_flag
        cancel_flag.clear()

        self.state = Running(start_from=start_from, total=total)
        self.progress = ImportProgress.of(start_from, total)

        def on_progress(p: ImportProgress) -> None:
            # Per-run counts → counts over the whole selection
            if generation == self._generation:
                self._set_progress(ImportProgress.of(start_from + p.current, total))

        try:
            ids = await self._insert_op(list(pending), on_progress, cancel_flag)
        except Exception as exc:
            if generation != self._generation:
                return
            logger.exception(f"Import failed after {self.progress.current}/{total} rows")
            self.state = Completed(
                imported_count=self.progress.current, total=total,
                errors=(str(exc) or "Erro ao importar",),
            )
            return

        if generation != self._generation:
            logger.info("Import session closed while running; result dropped")
            return

        ids = list(ids or [])
        self._inserted_ids.extend(ids)
        self._committed = start_from + len(ids)

        if cancel_flag.is_set():
            logger.info(f"Import paused at {self._committed}/{total}")
            self.state = Paused(
                committed_count=self._committed, total=total,
                inserted_ids=tuple(self._inserted_ids),
            )
        else:
            self.state = Completed(imported_count=total, total=total)

    def _require_paused(self, action: str) -> Paused:
        if not isinstance(self.state, Paused):
            raise ImportStateError(f"cannot {action} while {self.stage.value}")
        return self.state

    def _set_progress(self, progress: ImportProgress) -> None:
        self.progress = progress
        if self._listener is not None:
            self._listener(progress)
