"""
import_engine.field_map - Header and status synonym tables.

Keys are compared lower-cased.  Header keys appear both with and
without accents so a lookup works before and after accent stripping.
"""

# File header (PT/EN)  →  canonical ImportedRow field
HEADER_MAP: dict[str, str] = {
    "título":     "title",
    "titulo":     "title",
    "nome":       "title",
    "name":       "title",
    "title":      "title",
    "status":     "status",
    "estado":     "status",
    "nota":       "rating",
    "rating":     "rating",
    "avaliação":  "rating",
    "avaliacao":  "rating",
    "plataforma": "platform",
    "platform":   "platform",
    "gênero":     "genres",
    "genero":     "genres",
    "gêneros":    "genres",
    "generos":    "genres",
    "genres":     "genres",
    "genre":      "genres",
    "autor":      "author",
    "author":     "author",
    "isbn":       "isbn",
    "sinopse":    "synopsis",
    "synopsis":   "synopsis",
    "descrição":  "synopsis",
    "descricao":  "synopsis",
    "description": "synopsis",
}

# Status cell value (PT/EN)  →  canonical status name
STATUS_MAP: dict[str, str] = {
    "pendente":   "PENDING",
    "pending":    "PENDING",
    "backlog":    "PENDING",
    "assistindo": "WATCHING",
    "watching":   "WATCHING",
    "jogando":    "WATCHING",
    "playing":    "WATCHING",
    "lendo":      "WATCHING",
    "reading":    "WATCHING",
    "completo":   "COMPLETED",
    "completed":  "COMPLETED",
    "concluído":  "COMPLETED",
    "concluido":  "COMPLETED",
    "zerado":     "COMPLETED",
    "finished":   "COMPLETED",
    "casual":     "CASUAL",
}

# Canonical fields that ImportedRow interprets; anything else is passthrough
KNOWN_FIELDS = frozenset(HEADER_MAP.values())

# A .txt first line containing any of these (after normalisation)
# is treated as a header row
TXT_HEADER_MARKERS = frozenset({"title", "status", "rating", "platform"})

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv", ".txt")
SPREADSHEET_EXTENSIONS = frozenset({".xlsx", ".xls"})
