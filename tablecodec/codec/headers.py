from __future__ import annotations

import logging
from collections import Counter

from openpyxl.utils import column_index_from_string

from ..errors import DuplicateHeaderError, InvalidParametersError
from ..grid.oriented import OrientedGrid
from ..models.field_list import Field, FieldList
from ..store.base import is_blank

"""Header resolution.

Reads the single header row (normal) or header column (pivot) and turns it
into an ordered FieldList. Blank header cells never become fields but keep
their slot, so every field remembers the position of its cell.
"""

__all__ = [
    "resolve_fields",
    "column_index",
]

logger = logging.getLogger(__name__)


def column_index(column: int | str) -> int:
    """1-based column index from an int or a column letter ("A" -> 1, "AB" -> 28)."""
    if isinstance(column, bool):
        raise InvalidParametersError(f"invalid column: {column!r}")
    if isinstance(column, int):
        if column < 1:
            raise InvalidParametersError(f"column index must be >= 1, got {column}")
        return column
    if isinstance(column, str) and column.strip().isalpha():
        try:
            return column_index_from_string(column.strip().upper())
        except ValueError as e:
            raise InvalidParametersError(str(e)) from e
    raise InvalidParametersError(f"invalid column: {column!r}")


def resolve_fields(
    oriented: OrientedGrid,
    header_line: int,
    last_position: int | str | None = None,
    strict: bool = False,
) -> FieldList:
    """Resolve the field list of ``oriented`` from ``header_line``.

    Args:
        oriented: Table view in the requested orientation
        header_line: 1-based row (or column, in pivot) holding the names
        last_position: Optional cap on the header span; an int or a column letter
        strict: Raise DuplicateHeaderError instead of aliasing repeated names

    Returns:
        FieldList; empty when the header line has no names
    """
    if not isinstance(header_line, int) or header_line < 1:
        raise InvalidParametersError(f"header line must be a positive int, got {header_line!r}")

    width = column_index(last_position) if last_position is not None else oriented.header_width()
    if width <= 0:
        return FieldList(fields=(), width=0, header_line=header_line)

    header = oriented.read_lines(header_line, 1, width)[0]
    fields = tuple(
        Field(name=value if isinstance(value, str) else str(value), offset=offset)
        for offset, value in enumerate(header)
        if not is_blank(value)
    )

    dupes = sorted(name for name, n in Counter(f.name for f in fields).items() if n > 1)
    if dupes:
        if strict:
            raise DuplicateHeaderError(
                f"duplicate header names in '{oriented.table}' {oriented.axis} {header_line}: {dupes}"
            )
        logger.debug("duplicate header names alias onto one field: %s", dupes)

    return FieldList(fields=fields, width=width, header_line=header_line)
