"""
db.models - SQLAlchemy ORM declarations.

Tables
------
entries - one row per tracked title.  media_type selects the
          collection (movies, series, anime, books, games); columns an
          import does not interpret are kept verbatim in extra_json.
"""

from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime, Text, Index
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


class Entry(Base):
    __tablename__ = "entries"

    # ── Primary key ────────────────────────────────────────────────────
    id = Column(String(32), primary_key=True, default=_new_id)

    # ── Collection + tracking state ────────────────────────────────────
    media_type = Column(String(10), nullable=False, index=True)
    title      = Column(String(500), nullable=False, index=True)
    status     = Column(String(10), nullable=False, default="PENDING")
    rating     = Column(Float, nullable=True)

    # ── Metadata ───────────────────────────────────────────────────────
    platform    = Column(String(200), default="")
    genres_json = Column(Text, nullable=True)       # null = no genre data
    author      = Column(String(300), default="")
    isbn        = Column(String(20), default="")
    synopsis    = Column(Text, default="")

    # ── Passthrough columns from imports ───────────────────────────────
    extra_json = Column(Text, default="{}")

    # ── Timestamps ─────────────────────────────────────────────────────
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_entries_type_title", "media_type", "title"),
    )

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "media_type": self.media_type,
            "title": self.title,
            "status": self.status,
            "rating": self.rating,
            "platform": self.platform or "",
            "genres": json.loads(self.genres_json) if self.genres_json else None,
            "author": self.author or "",
            "isbn": self.isbn or "",
            "synopsis": self.synopsis or "",
            "extra": json.loads(self.extra_json or "{}"),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
