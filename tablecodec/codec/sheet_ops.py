from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from openpyxl.utils import get_column_letter

from ..errors import FieldNotFoundError, InvalidParametersError
from ..grid.accessor import GridAccessor
from ..grid.oriented import OrientedGrid
from .headers import column_index, resolve_fields
from .records import cell_value
from .upsert import index_lines, match_key

"""Smaller table maintenance helpers built on the same grid primitives."""

__all__ = [
    "clear_from_line",
    "delete_field_contents",
    "update_matching_line",
    "move_matching_line",
    "format_fields_as_text",
    "column_index",
    "column_letter",
]

logger = logging.getLogger(__name__)

TEXT_FORMAT = "@"


def column_letter(index: int) -> str:
    """Column letter for a 1-based index (1 -> "A", 28 -> "AB")."""
    if isinstance(index, bool) or not isinstance(index, int) or index < 1:
        raise InvalidParametersError(f"column index must be a positive int, got {index!r}")
    return get_column_letter(index)


def clear_from_line(grid: GridAccessor, table: str, start_line: int = 3, pivot: bool = False) -> int:
    """Clear every cell from ``start_line`` to the last populated line.

    Formatting and the lines themselves are kept. Returns the number of lines
    cleared (0 when nothing lies at or after ``start_line``).
    """
    oriented = OrientedGrid(grid, table, pivot=pivot)
    last_row, last_col = grid.dimensions(table)
    last_line, width = (last_col, last_row) if pivot else (last_row, last_col)
    if last_line < start_line:
        return 0
    n_lines = last_line - start_line + 1
    oriented.clear_lines(start_line, n_lines, width)
    logger.debug("cleared %d %ss of '%s' from %d", n_lines, oriented.axis, table, start_line)
    return n_lines


def delete_field_contents(
    grid: GridAccessor,
    table: str,
    field_name: str,
    header_line: int = 1,
    start_line: int = 2,
) -> int:
    """Clear one field's cells from ``start_line`` down; returns the number of cells cleared."""
    oriented = OrientedGrid(grid, table)
    fields = resolve_fields(oriented, header_line)
    offset = fields.offset_of(field_name)
    if offset is None:
        raise FieldNotFoundError(field_name, table)
    last_row, _ = grid.dimensions(table)
    n_lines = last_row - start_line + 1
    if n_lines <= 0:
        return 0
    grid.clear_region(table, (start_line, offset + 1), (n_lines, 1))
    return n_lines


def update_matching_line(
    grid: GridAccessor,
    table: str,
    match_field: str,
    match_value: Any,
    values: Mapping[str, Any],
    header_line: int = 1,
    start_line: int | None = None,
) -> int | None:
    """Patch the first line whose ``match_field`` equals ``match_value``.

    The line is read, patched with the fields of ``values`` that exist in the
    header, and written back in one block write. Returns the line number, or
    None when no line matched.
    """
    if not isinstance(values, Mapping):
        raise InvalidParametersError(f"values must be a mapping, got {type(values).__name__}")
    first_data = start_line if start_line is not None else header_line + 1
    oriented = OrientedGrid(grid, table)
    fields = resolve_fields(oriented, header_line)
    match_offset = fields.offset_of(match_field)
    if match_offset is None:
        raise FieldNotFoundError(match_field, table)

    existing = index_lines(oriented, match_offset, first_data, oriented.last_line(first_data))
    key = match_key(match_value)
    line = existing.get(key) if key is not None else None
    if line is None:
        logger.info("No matching row found in '%s' for %s=%r", table, match_field, match_value)
        return None

    current = oriented.read_lines(line, 1, fields.width)[0]
    for name in values:
        offset = fields.offset_of(name)
        if offset is not None:
            current[offset] = cell_value(values, name)
    oriented.write_lines(line, [current])
    return line


def move_matching_line(
    grid: GridAccessor,
    source: str,
    target: str,
    match_field: str,
    match_value: Any,
    header_line: int = 1,
    start_line: int | None = None,
    pivot: bool = False,
) -> int | None:
    """Move the first line whose ``match_field`` equals ``match_value`` to ``target``.

    The line is copied, as wide as the source's populated extent, to the line
    after the target's last populated line and then deleted from the source,
    so later source lines shift back by one. Values are copied, formulas are
    not. Returns the line number in ``target``, or None when no line matched.

    Raises:
        FieldNotFoundError: ``match_field`` is not a source header name
        TableNotFoundError: Unknown source or target table
    """
    first_data = start_line if start_line is not None else header_line + 1
    src = OrientedGrid(grid, source, pivot=pivot)
    dst = OrientedGrid(grid, target, pivot=pivot)
    fields = resolve_fields(src, header_line)
    match_offset = fields.offset_of(match_field)
    if match_offset is None:
        raise FieldNotFoundError(match_field, source)

    existing = index_lines(src, match_offset, first_data, src.last_line(first_data))
    key = match_key(match_value)
    line = existing.get(key) if key is not None else None
    if line is None:
        logger.info("No matching %s found in '%s' for %s=%r", src.axis, source, match_field, match_value)
        return None

    values = src.read_lines(line, 1, src.header_width())[0]
    dest_line = dst.last_line(header_line) + 1
    dst.write_lines(dest_line, [values])
    src.delete_lines(line, 1)
    if source == target and dest_line > line:
        dest_line -= 1
    logger.info("Moved %s %d of '%s' to %s %d of '%s'", src.axis, line, source, dst.axis, dest_line, target)
    return dest_line


def format_fields_as_text(
    grid: GridAccessor,
    table: str,
    field_names: Sequence[str],
    header_line: int = 1,
    start_line: int | None = None,
    n_lines: int | None = None,
    pivot: bool = False,
) -> int:
    """Set the plain-text number format ("@") on the data cells of each named field.

    Without ``n_lines`` the cells from ``start_line`` through the last
    populated line are formatted; pass ``n_lines`` to format a fixed extent
    ahead of a write. Returns the number of lines formatted per field.

    Raises:
        FieldNotFoundError: A name is not a header name (nothing is formatted)
    """
    if isinstance(field_names, (str, bytes)) or not isinstance(field_names, Sequence):
        raise InvalidParametersError("field names must be a sequence of strings")
    first_data = start_line if start_line is not None else header_line + 1
    oriented = OrientedGrid(grid, table, pivot=pivot)
    fields = resolve_fields(oriented, header_line)
    offsets = []
    for name in field_names:
        offset = fields.offset_of(name)
        if offset is None:
            raise FieldNotFoundError(name, table)
        offsets.append(offset)

    if n_lines is None:
        n_lines = oriented.last_line(first_data) - first_data + 1
    if n_lines <= 0:
        return 0
    for offset in offsets:
        oriented.format_position(first_data, n_lines, offset, TEXT_FORMAT)
    logger.debug("formatted %d %ss of %s in '%s' as text", n_lines, oriented.axis, ", ".join(field_names), table)
    return n_lines
