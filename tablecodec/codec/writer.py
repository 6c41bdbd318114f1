from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..errors import InvalidParametersError
from ..grid.accessor import GridAccessor
from ..grid.oriented import OrientedGrid
from ..models.field_list import FieldList
from ..models.operation_result import WriteResult
from ..models.options import WriteMode, WriteOptions
from ..store.base import CellVariant
from .headers import resolve_fields
from .records import cell_value, encode, validate_records

"""Write-mode strategy.

Writes records into a table under one of three merge policies. The policies
behave the same in both orientations; OrientedGrid does the row/column swap.

overwrite  clear [start, last populated], write from start, optionally
           replay the formulas that were in the cleared region
append     write after the last populated line, touching nothing else
overlay    merge supplied fields into lines [start, start + N), rewriting
           unsupplied cells with their current value (and formula)
"""

__all__ = [
    "write_records",
]

logger = logging.getLogger(__name__)


def write_records(
    grid: GridAccessor,
    table: str,
    records: Sequence[Mapping[str, Any]],
    header_line: int = 1,
    start_line: int = 3,
    options: WriteOptions | None = None,
) -> WriteResult:
    """Write ``records`` into ``table`` using the configured write mode.

    Args:
        grid: Grid accessor over the target store
        table: Table name
        records: Sequence of field-name -> value mappings
        header_line: Row (column in pivot) holding the field names
        start_line: First data row (column in pivot)
        options: WriteOptions; mode may be a WriteMode or its string value

    Raises:
        InvalidModeError: Unknown mode string
        InvalidParametersError: Malformed records or line numbers
        TableNotFoundError: Unknown table
    """
    opts = options or WriteOptions()
    mode = opts.write_mode
    rows = validate_records(records)
    if not isinstance(start_line, int) or start_line < 1:
        raise InvalidParametersError(f"start line must be a positive int, got {start_line!r}")

    oriented = OrientedGrid(grid, table, pivot=opts.pivot)
    fields = resolve_fields(oriented, header_line, strict=opts.strict_headers)

    if mode is WriteMode.OVERWRITE:
        result = _overwrite(oriented, fields, rows, start_line, opts.preserve_formulas)
    elif mode is WriteMode.APPEND:
        result = _append(oriented, fields, rows, start_line)
    else:
        result = _overlay(oriented, fields, rows, start_line, opts.preserve_formulas)

    logger.info(
        "%s: %d %ss written to '%s' from %s %d",
        mode.value,
        result.lines_written,
        oriented.axis,
        table,
        oriented.axis,
        result.first_line,
    )
    return result


def _overwrite(
    oriented: OrientedGrid,
    fields: FieldList,
    records: list[Mapping[str, Any]],
    start_line: int,
    preserve_formulas: bool,
) -> WriteResult:
    lines = encode(records, fields)
    width = fields.width
    last_line = oriented.last_line(start_line)
    n_existing = last_line - start_line + 1 if last_line >= start_line else 0

    formulas: list[list[Any]] = []
    if preserve_formulas and n_existing > 0:
        formulas = oriented.read_lines(start_line, n_existing, width, CellVariant.FORMULA)

    if n_existing > 0:
        oriented.clear_lines(start_line, n_existing, width)
    if lines and width > 0:
        oriented.write_lines(start_line, lines)

    # Replay after the value write: a restored formula wins over new data.
    restored = 0
    for i, line in enumerate(formulas):
        for pos, formula in enumerate(line):
            if formula:
                oriented.write_formula(start_line + i, pos, formula)
                restored += 1

    return WriteResult(
        table=oriented.table,
        mode=WriteMode.OVERWRITE,
        lines_written=len(lines) if width > 0 else 0,
        first_line=start_line,
        formulas_restored=restored,
    )


def _append(
    oriented: OrientedGrid,
    fields: FieldList,
    records: list[Mapping[str, Any]],
    start_line: int,
) -> WriteResult:
    lines = encode(records, fields)
    first = oriented.last_line(start_line) + 1
    if lines and fields.width > 0:
        oriented.write_lines(first, lines)
    return WriteResult(
        table=oriented.table,
        mode=WriteMode.APPEND,
        lines_written=len(lines) if fields.width > 0 else 0,
        first_line=first,
    )


def _supplied(record: Mapping[str, Any], fields: FieldList) -> dict[int, Any]:
    """Positions explicitly supplied by ``record`` mapped to the value to write."""
    return {f.offset: cell_value(record, f.name) for f in fields if f.name in record}


def _overlay(
    oriented: OrientedGrid,
    fields: FieldList,
    records: list[Mapping[str, Any]],
    start_line: int,
    preserve_formulas: bool,
) -> WriteResult:
    width = fields.width
    if not records or width <= 0:
        return WriteResult(table=oriented.table, mode=WriteMode.OVERLAY, lines_written=0, first_line=start_line)

    if not preserve_formulas:
        current = oriented.read_lines(start_line, len(records), width, CellVariant.VALUE)
        for line, record in zip(current, records):
            for pos, value in _supplied(record, fields).items():
                line[pos] = value
        oriented.write_lines(start_line, current)
        return WriteResult(
            table=oriented.table,
            mode=WriteMode.OVERLAY,
            lines_written=len(records),
            first_line=start_line,
        )

    restored = 0
    for i, record in enumerate(records):
        target = start_line + i
        values = oriented.read_lines(target, 1, width, CellVariant.VALUE)[0]
        formulas = oriented.read_lines(target, 1, width, CellVariant.FORMULA)[0]
        supplied = _supplied(record, fields)
        merged = [supplied[pos] if pos in supplied else values[pos] for pos in range(width)]
        oriented.write_lines(target, [merged])
        for pos, formula in enumerate(formulas):
            if pos not in supplied and formula:
                oriented.write_formula(target, pos, formula)
                restored += 1

    return WriteResult(
        table=oriented.table,
        mode=WriteMode.OVERLAY,
        lines_written=len(records),
        first_line=start_line,
        formulas_restored=restored,
    )
