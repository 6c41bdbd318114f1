from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any

from ..errors import TableNotFoundError
from .base import CellVariant, is_blank

"""In-memory table store.

Cells are kept sparsely per table. A cell carries a literal value and
optionally a formula, whose evaluated value is whatever was last stored as
``value``. Formatting is kept as a date display format, used to render the
display variant, and a number format (for example "@" for plain text).
Clearing a cell drops value and formula but keeps the formatting, like
clearing content in a spreadsheet.
"""

__all__ = [
    "Cell",
    "MemoryTableStore",
    "render_display",
]

DEFAULT_DATE_FORMAT = "%Y-%m-%d"
DEFAULT_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class Cell:
    value: Any = ""
    formula: str = ""
    date_format: str | None = None
    number_format: str | None = None

    @property
    def has_content(self) -> bool:
        return not is_blank(self.value) or self.formula != ""


def render_display(value: Any, date_format: str | None = None) -> str:
    """Render a value the way a spreadsheet shows it by default."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        return value.strftime(date_format or DEFAULT_DATETIME_FORMAT)
    if isinstance(value, date):
        return value.strftime(date_format or DEFAULT_DATE_FORMAT)
    if isinstance(value, time):
        return value.strftime(date_format or "%H:%M:%S")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class MemoryTableStore:
    """Dict-backed TableStore used for staging data and in tests."""

    def __init__(self) -> None:
        self._tables: dict[str, dict[tuple[int, int], Cell]] = {}

    def add_table(self, table: str, rows: Sequence[Sequence[Any]] | None = None) -> None:
        """Create (or reset) a table, optionally seeded from row 1 column 1."""
        self._tables[table] = {}
        if rows:
            self.set_block(table, 1, 1, rows)

    def table_names(self) -> list[str]:
        return list(self._tables)

    def _cells(self, table: str) -> dict[tuple[int, int], Cell]:
        try:
            return self._tables[table]
        except KeyError:
            raise TableNotFoundError(table) from None

    def cell(self, table: str, row: int, col: int) -> Cell:
        """Direct cell access (created on demand)."""
        return self._cells(table).setdefault((row, col), Cell())

    def set_date_format(self, table: str, row: int, col: int, fmt: str) -> None:
        self.cell(table, row, col).date_format = fmt

    # --- TableStore -------------------------------------------------

    def has_table(self, table: str) -> bool:
        return table in self._tables

    def dimensions(self, table: str) -> tuple[int, int]:
        last_row = last_col = 0
        for (r, c), cell in self._cells(table).items():
            if cell.has_content:
                last_row = max(last_row, r)
                last_col = max(last_col, c)
        return last_row, last_col

    def get_block(
        self, table: str, row: int, col: int, n_rows: int, n_cols: int, variant: CellVariant
    ) -> list[list[Any]]:
        cells = self._cells(table)
        block: list[list[Any]] = []
        for r in range(row, row + n_rows):
            line: list[Any] = []
            for c in range(col, col + n_cols):
                cell = cells.get((r, c))
                if cell is None:
                    line.append("")
                elif variant is CellVariant.FORMULA:
                    line.append(cell.formula)
                elif variant is CellVariant.DISPLAY:
                    line.append(render_display(cell.value, cell.date_format))
                else:
                    line.append("" if cell.value is None else cell.value)
            block.append(line)
        return block

    def set_block(self, table: str, row: int, col: int, matrix: Sequence[Sequence[Any]]) -> None:
        cells = self._cells(table)
        for i, line in enumerate(matrix):
            for j, value in enumerate(line):
                cell = cells.setdefault((row + i, col + j), Cell())
                cell.value = "" if value is None else value
                cell.formula = ""

    def set_formula(self, table: str, row: int, col: int, formula: str) -> None:
        cell = self._cells(table).setdefault((row, col), Cell())
        cell.formula = formula if formula.startswith("=") else f"={formula}"

    def clear_block(self, table: str, row: int, col: int, n_rows: int, n_cols: int) -> None:
        cells = self._cells(table)
        for r in range(row, row + n_rows):
            for c in range(col, col + n_cols):
                cell = cells.get((r, c))
                if cell is not None:
                    cell.value = ""
                    cell.formula = ""

    def delete_rows(self, table: str, row: int, n_rows: int) -> None:
        cells = self._cells(table)
        kept = {(r, c): cell for (r, c), cell in cells.items() if not row <= r < row + n_rows}
        cells.clear()
        cells.update({((r - n_rows if r >= row else r), c): cell for (r, c), cell in kept.items()})

    def delete_cols(self, table: str, col: int, n_cols: int) -> None:
        cells = self._cells(table)
        kept = {(r, c): cell for (r, c), cell in cells.items() if not col <= c < col + n_cols}
        cells.clear()
        cells.update({(r, (c - n_cols if c >= col else c)): cell for (r, c), cell in kept.items()})

    def set_number_format(
        self, table: str, row: int, col: int, n_rows: int, n_cols: int, number_format: str
    ) -> None:
        cells = self._cells(table)
        for r in range(row, row + n_rows):
            for c in range(col, col + n_cols):
                cells.setdefault((r, c), Cell()).number_format = number_format
