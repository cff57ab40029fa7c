"""
import_engine.report - Structured result of parsing one import file.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional


class Status(str, enum.Enum):
    """Tracking status of a media entry."""
    PENDING = "PENDING"
    WATCHING = "WATCHING"
    COMPLETED = "COMPLETED"
    CASUAL = "CASUAL"


@dataclass(frozen=True)
class ImportedRow:
    """A normalized, not-yet-persisted record."""
    title: str
    status: Status = Status.PENDING
    rating: Optional[float] = None
    platform: Optional[str] = None
    genres: Optional[tuple[str, ...]] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    synopsis: Optional[str] = None
    extra: dict[str, str] = field(default_factory=dict)   # passthrough columns

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"title": self.title, "status": self.status.value}
        for attr in ("rating", "platform", "author", "isbn", "synopsis"):
            val = getattr(self, attr)
            if val is not None:
                d[attr] = val
        if self.genres is not None:
            d["genres"] = list(self.genres)
        if self.extra:
            d["extra"] = dict(self.extra)
        return d


@dataclass(frozen=True)
class ImportResult:
    rows: tuple[ImportedRow, ...] = ()
    headers: tuple[str, ...] = ()
    errors: tuple[str, ...] = ()       # one per skipped row or file-level failure

    @classmethod
    def failure(cls, message: str) -> "ImportResult":
        """Empty result carrying a single displayable error."""
        return cls(errors=(message,))

    @property
    def ok(self) -> bool:
        return bool(self.rows)

    def to_dict(self) -> dict:
        return {
            "rows": [r.to_dict() for r in self.rows],
            "headers": list(self.headers),
            "errors": list(self.errors),
        }
