from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..errors import TableNotFoundError
from ..store.base import CellVariant, TableStore, is_blank

"""Grid accessor: rectangular reads/writes and extent scans over a TableStore.

Every call is one synchronous round trip to the store. Unknown tables raise
TableNotFoundError before anything is read or written.
"""

__all__ = [
    "GridAccessor",
]

logger = logging.getLogger(__name__)


class GridAccessor:
    def __init__(self, store: TableStore) -> None:
        self.store = store

    def require_table(self, table: str) -> None:
        if not self.store.has_table(table):
            raise TableNotFoundError(table)

    def dimensions(self, table: str) -> tuple[int, int]:
        self.require_table(table)
        return self.store.dimensions(table)

    def read_block(
        self,
        table: str,
        origin: tuple[int, int],
        shape: tuple[int, int],
        variant: CellVariant = CellVariant.VALUE,
    ) -> list[list[Any]]:
        """Read ``shape`` = (rows, cols) cells at ``origin`` = (row, col).

        The result is always rectangular; empty shapes give an empty list.
        """
        self.require_table(table)
        n_rows, n_cols = shape
        if n_rows <= 0 or n_cols <= 0:
            return [[] for _ in range(max(n_rows, 0))]
        block = self.store.get_block(table, origin[0], origin[1], n_rows, n_cols, variant)
        # Pad ragged host output so callers can index freely.
        padded = [list(line) + [""] * (n_cols - len(line)) for line in block[:n_rows]]
        padded.extend([""] * n_cols for _ in range(n_rows - len(padded)))
        return padded

    def write_block(self, table: str, origin: tuple[int, int], matrix: Sequence[Sequence[Any]]) -> None:
        self.require_table(table)
        if not matrix or not matrix[0]:
            return
        width = len(matrix[0])
        if any(len(line) != width for line in matrix):
            raise ValueError("write_block requires a rectangular matrix")
        self.store.set_block(table, origin[0], origin[1], matrix)
        logger.debug("wrote %dx%d block to %s at %s", len(matrix), width, table, origin)

    def write_single_formula(self, table: str, cell: tuple[int, int], formula: str) -> None:
        self.require_table(table)
        self.store.set_formula(table, cell[0], cell[1], formula)

    def clear_region(self, table: str, origin: tuple[int, int], shape: tuple[int, int]) -> None:
        self.require_table(table)
        if shape[0] <= 0 or shape[1] <= 0:
            return
        self.store.clear_block(table, origin[0], origin[1], shape[0], shape[1])

    def delete_rows(self, table: str, row: int, n_rows: int) -> None:
        self.require_table(table)
        if n_rows > 0:
            self.store.delete_rows(table, row, n_rows)

    def delete_columns(self, table: str, col: int, n_cols: int) -> None:
        self.require_table(table)
        if n_cols > 0:
            self.store.delete_cols(table, col, n_cols)

    def format_region(
        self, table: str, origin: tuple[int, int], shape: tuple[int, int], number_format: str
    ) -> None:
        self.require_table(table)
        if shape[0] <= 0 or shape[1] <= 0:
            return
        self.store.set_number_format(table, origin[0], origin[1], shape[0], shape[1], number_format)

    def last_populated_row(self, table: str) -> int:
        """Last row with a non-empty value, scanning upward; 1 when none."""
        last_row, last_col = self.dimensions(table)
        if last_row == 0 or last_col == 0:
            return 1
        values = self.store.get_block(table, 1, 1, last_row, last_col, CellVariant.VALUE)
        for r in range(len(values) - 1, -1, -1):
            if any(not is_blank(v) for v in values[r]):
                return r + 1
        return 1

    def last_populated_column(self, table: str, from_column: int) -> int:
        """Last column >= ``from_column`` with a non-empty value; ``from_column`` when none."""
        last_row, last_col = self.dimensions(table)
        if last_row == 0 or last_col == 0 or last_col < from_column:
            return from_column
        values = self.store.get_block(table, 1, 1, last_row, last_col, CellVariant.VALUE)
        for c in range(last_col - 1, from_column - 2, -1):
            if any(not is_blank(line[c]) for line in values if c < len(line)):
                return c + 1
        return from_column
