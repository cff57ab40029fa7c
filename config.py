"""
MediaDash - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR  = Path(__file__).resolve().parent
SEED_PATH = Path(os.environ.get("MEDIADASH_SEED", BASE_DIR / "seed_import.csv"))
SEED_TYPE = os.environ.get("MEDIADASH_SEED_TYPE", "MOVIE").upper()

# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("MEDIADASH_DB", f"sqlite:///{BASE_DIR / 'mediadash.sqlite'}")

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("MEDIADASH_HOST", "0.0.0.0")
PORT   = int(os.environ.get("MEDIADASH_PORT", "5000"))
DEBUG  = os.environ.get("MEDIADASH_DEBUG", "0") == "1"
SECRET = os.environ.get("MEDIADASH_SECRET", "mediadash-dev-key-change-in-prod")

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("MEDIADASH_LOG_LEVEL", "INFO").upper()

# ── Import pipeline ────────────────────────────────────────────────────
PREVIEW_PAGE_SIZE = int(os.environ.get("MEDIADASH_PREVIEW_PAGE_SIZE", "10"))
MAX_UPLOAD_BYTES  = int(os.environ.get("MEDIADASH_MAX_UPLOAD_BYTES", str(16 * 1024 * 1024)))
# Seconds an untouched import flow is kept before the runner closes it
FLOW_IDLE_TTL     = int(os.environ.get("MEDIADASH_FLOW_IDLE_TTL", "3600"))

# Collections an import can target (one per tracked media kind)
MEDIA_TYPES = ("MOVIE", "SERIES", "ANIME", "BOOK", "GAME")

# Plural labels used in operator-facing messages
MEDIA_TYPE_LABELS = {
    "MOVIE":  "filmes",
    "SERIES": "séries",
    "ANIME":  "animes",
    "BOOK":   "livros",
    "GAME":   "jogos",
}

# ── Pagination ─────────────────────────────────────────────────────────
API_MAX_LIMIT     = 1000
API_DEFAULT_LIMIT = 100
