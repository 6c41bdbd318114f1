from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..store.base import CellVariant
from .accessor import GridAccessor

"""Orientation-aware view of one table.

The codec and the write strategy work in terms of *lines* and *positions*.
In normal orientation a line is a row and positions are columns counted from
column 1; in pivot orientation a line is a column and positions are rows
counted from row 1. All offsets handed to and returned from this class are
0-based positions; line numbers are 1-based.
"""

__all__ = [
    "OrientedGrid",
    "transpose",
]


def transpose(matrix: Sequence[Sequence[Any]]) -> list[list[Any]]:
    if not matrix:
        return []
    return [list(col) for col in zip(*matrix)]


class OrientedGrid:
    def __init__(self, grid: GridAccessor, table: str, pivot: bool = False) -> None:
        self.grid = grid
        self.table = table
        self.pivot = pivot
        grid.require_table(table)

    @property
    def axis(self) -> str:
        return "column" if self.pivot else "row"

    def header_width(self) -> int:
        """Number of positions spanned by populated cells (columns, or rows in pivot)."""
        last_row, last_col = self.grid.dimensions(self.table)
        return last_row if self.pivot else last_col

    def last_line(self, from_line: int = 1) -> int:
        """Last populated line, or the default boundary when nothing is found."""
        if self.pivot:
            return self.grid.last_populated_column(self.table, from_line)
        return self.grid.last_populated_row(self.table)

    def _origin(self, line: int, position: int = 0) -> tuple[int, int]:
        if self.pivot:
            return (position + 1, line)
        return (line, position + 1)

    def _shape(self, n_lines: int, width: int) -> tuple[int, int]:
        return (width, n_lines) if self.pivot else (n_lines, width)

    def read_lines(
        self, first_line: int, n_lines: int, width: int, variant: CellVariant = CellVariant.VALUE
    ) -> list[list[Any]]:
        if n_lines <= 0 or width <= 0:
            return [[] for _ in range(max(n_lines, 0))]
        block = self.grid.read_block(self.table, self._origin(first_line), self._shape(n_lines, width), variant)
        return transpose(block) if self.pivot else block

    def write_lines(self, first_line: int, lines: Sequence[Sequence[Any]]) -> None:
        if not lines or not lines[0]:
            return
        matrix = transpose(lines) if self.pivot else [list(line) for line in lines]
        self.grid.write_block(self.table, self._origin(first_line), matrix)

    def read_position(
        self, first_line: int, n_lines: int, position: int, variant: CellVariant = CellVariant.VALUE
    ) -> list[Any]:
        """Values at one position (a column in normal orientation) across ``n_lines`` lines."""
        if n_lines <= 0:
            return []
        block = self.grid.read_block(self.table, self._origin(first_line, position), self._shape(n_lines, 1), variant)
        return block[0] if self.pivot else [line[0] for line in block]

    def write_position(self, first_line: int, position: int, values: Sequence[Any]) -> None:
        if not values:
            return
        matrix = [list(values)] if self.pivot else [[v] for v in values]
        self.grid.write_block(self.table, self._origin(first_line, position), matrix)

    def write_cell(self, line: int, position: int, value: Any) -> None:
        self.grid.write_block(self.table, self._origin(line, position), [[value]])

    def write_formula(self, line: int, position: int, formula: str) -> None:
        self.grid.write_single_formula(self.table, self._origin(line, position), formula)

    def clear_lines(self, first_line: int, n_lines: int, width: int) -> None:
        self.grid.clear_region(self.table, self._origin(first_line), self._shape(n_lines, width))

    def delete_lines(self, first_line: int, n_lines: int) -> None:
        """Remove lines; later lines shift back to fill the gap."""
        if self.pivot:
            self.grid.delete_columns(self.table, first_line, n_lines)
        else:
            self.grid.delete_rows(self.table, first_line, n_lines)

    def format_position(self, first_line: int, n_lines: int, position: int, number_format: str) -> None:
        self.grid.format_region(
            self.table, self._origin(first_line, position), self._shape(n_lines, 1), number_format
        )
