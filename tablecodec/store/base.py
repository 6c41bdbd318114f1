from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Protocol, runtime_checkable

"""Table store capability.

The transcoder never touches a host object model directly. Everything it
needs from a document store is the handful of rectangular reads and writes
below; concrete adapters live next to this module (``memory``, ``workbook``).

Coordinates are 1-based. Every method raises ``TableNotFoundError`` for an
unknown table name.
"""

__all__ = [
    "CellVariant",
    "TableStore",
    "is_blank",
]


class CellVariant(Enum):
    """Which face of a cell a read returns."""
    VALUE = "value"  # underlying value (number, text, bool, date)
    DISPLAY = "display"  # text as rendered by the host
    FORMULA = "formula"  # formula text, "" for literal cells


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


@runtime_checkable
class TableStore(Protocol):
    def has_table(self, table: str) -> bool: ...

    def dimensions(self, table: str) -> tuple[int, int]:
        """(last_row, last_col) holding a value or formula; (0, 0) when empty."""
        ...

    def get_block(
        self, table: str, row: int, col: int, n_rows: int, n_cols: int, variant: CellVariant
    ) -> list[list[Any]]:
        """Rectangular read padded with "" outside populated cells."""
        ...

    def set_block(self, table: str, row: int, col: int, matrix: Sequence[Sequence[Any]]) -> None: ...

    def set_formula(self, table: str, row: int, col: int, formula: str) -> None: ...

    def clear_block(self, table: str, row: int, col: int, n_rows: int, n_cols: int) -> None:
        """Blank values and formulas, keep formatting."""
        ...

    def delete_rows(self, table: str, row: int, n_rows: int) -> None:
        """Remove rows; rows below move up."""
        ...

    def delete_cols(self, table: str, col: int, n_cols: int) -> None:
        """Remove columns; columns to the right move left."""
        ...

    def set_number_format(
        self, table: str, row: int, col: int, n_rows: int, n_cols: int, number_format: str
    ) -> None: ...
