"""
import_engine.preview - Paginated preview and row selection of a parsed file.
"""

from __future__ import annotations

import math

import config
from import_engine.report import ImportedRow, ImportResult

# Columns shown only when the file actually had them
OPTIONAL_COLUMNS = ("rating", "platform", "author")


class ImportPreview:
    """
    Selection state over one ImportResult.  Every row starts selected;
    only toggle_row() and toggle_all() change the selection.
    """

    def __init__(self, result: ImportResult, page_size: int = config.PREVIEW_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.result = result
        self.page_size = page_size
        self.selected: set[int] = set(range(len(result.rows)))

    @property
    def row_count(self) -> int:
        return len(self.result.rows)

    @property
    def page_count(self) -> int:
        return math.ceil(self.row_count / self.page_size)

    @property
    def columns(self) -> list[str]:
        return ["title", "status"] + [c for c in OPTIONAL_COLUMNS if c in self.result.headers]

    @property
    def all_selected(self) -> bool:
        return len(self.selected) == self.row_count

    @property
    def can_import(self) -> bool:
        return bool(self.selected)

    def page(self, number: int) -> list[tuple[int, ImportedRow]]:
        """Rows of 1-based page `number` with their global indices."""
        number = min(max(number, 1), max(self.page_count, 1))
        offset = (number - 1) * self.page_size
        rows = self.result.rows[offset:offset + self.page_size]
        return [(offset + i, row) for i, row in enumerate(rows)]

    def toggle_row(self, index: int) -> bool:
        """Flip one row; returns its new selected state."""
        if not 0 <= index < self.row_count:
            raise IndexError(f"row {index} out of range")
        if index in self.selected:
            self.selected.discard(index)
            return False
        self.selected.add(index)
        return True

    def toggle_all(self) -> None:
        if self.all_selected:
            self.selected.clear()
        else:
            self.selected = set(range(self.row_count))

    def selected_rows(self) -> list[ImportedRow]:
        """Selected rows in file order."""
        return [row for i, row in enumerate(self.result.rows) if i in self.selected]

    def page_dict(self, number: int) -> dict:
        number = min(max(number, 1), max(self.page_count, 1))
        return {
            "page": number,
            "page_count": self.page_count,
            "page_size": self.page_size,
            "columns": self.columns,
            "rows": [
                {"index": idx, "selected": idx in self.selected, **row.to_dict()}
                for idx, row in self.page(number)
            ],
        }
