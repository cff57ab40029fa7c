"""
services.entries_service - Persistence of imported rows as Entry records.

EntriesService holds the plain session-level operations (the caller
owns the session).  make_insert_operation() / make_discard_operation()
wrap them into the async capabilities the batch importer expects:
each row is inserted and committed in its own session on a worker
thread, so a paused batch leaves exactly the committed rows behind.
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

import config
from db.engine import get_session
from db.models import Entry
from import_engine.batch import (
    DiscardOperation,
    InsertOperation,
    ProgressCallback,
    run_sequential_insert,
)
from import_engine.report import ImportedRow

logger = logging.getLogger(__name__)


class EntriesService:

    # ── Create ─────────────────────────────────────────────────────────

    @staticmethod
    def insert_one(session: Session, media_type: str, row: ImportedRow) -> Entry:
        """Add one imported row to the session and flush it.  Returns the Entry (id assigned)."""
        entry = Entry(
            media_type=media_type,
            title=row.title,
            status=row.status.value,
            rating=row.rating,
            platform=row.platform or "",
            genres_json=json.dumps(list(row.genres), ensure_ascii=False)
            if row.genres is not None else None,
            author=row.author or "",
            isbn=row.isbn or "",
            synopsis=row.synopsis or "",
            extra_json=json.dumps(row.extra, ensure_ascii=False),
        )
        session.add(entry)
        session.flush()
        return entry

    # ── Read ───────────────────────────────────────────────────────────

    @staticmethod
    def list_entries(session: Session, media_type: Optional[str] = None,
                     limit: int = config.API_DEFAULT_LIMIT, offset: int = 0) -> list[Entry]:
        stmt = select(Entry).order_by(Entry.created_at, Entry.title)
        if media_type:
            stmt = stmt.where(Entry.media_type == media_type)
        return list(session.execute(stmt.limit(limit).offset(offset)).scalars())

    @staticmethod
    def count(session: Session, media_type: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(Entry)
        if media_type:
            stmt = stmt.where(Entry.media_type == media_type)
        return session.execute(stmt).scalar_one()

    # ── Delete ─────────────────────────────────────────────────────────

    @staticmethod
    def delete_many(session: Session, ids: Sequence[str]) -> int:
        if not ids:
            return 0
        res = session.execute(delete(Entry).where(Entry.id.in_(list(ids))))
        return res.rowcount or 0


# ── Batch-importer capabilities ────────────────────────────────────────

def _insert_committed(media_type: str, row: ImportedRow) -> str:
    session = get_session()
    try:
        entry = EntriesService.insert_one(session, media_type, row)
        session.commit()
        return entry.id
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def _delete_committed(ids: list[str]) -> int:
    session = get_session()
    try:
        n = EntriesService.delete_many(session, ids)
        session.commit()
        return n
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def make_insert_operation(media_type: str) -> InsertOperation:
    """Insert capability targeting the `media_type` collection."""
    media_type = media_type.upper()
    if media_type not in config.MEDIA_TYPES:
        raise ValueError(f"unknown media type {media_type!r}")

    async def insert_one(row: ImportedRow) -> str:
        return await asyncio.to_thread(_insert_committed, media_type, row)

    async def insert_rows(
        rows: Sequence[ImportedRow],
        on_progress: ProgressCallback,
        cancel_flag: threading.Event,
    ) -> list[str]:
        return await run_sequential_insert(rows, insert_one, on_progress, cancel_flag)

    return insert_rows


def make_discard_operation() -> DiscardOperation:
    async def discard(ids: list[str]) -> None:
        n = await asyncio.to_thread(_delete_committed, ids)
        logger.info(f"Deleted {n} of {len(ids)} entries")

    return discard
