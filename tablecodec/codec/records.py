from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from typing import Any

from ..errors import InvalidParametersError
from ..grid.accessor import GridAccessor
from ..grid.oriented import OrientedGrid
from ..models.decode_result import DecodeResult, DecodeStatus
from ..models.field_list import FieldList
from ..models.line_record import LineRecord
from ..models.options import ReadOptions
from ..store.base import CellVariant, is_blank
from .headers import resolve_fields

"""Row/column <-> record transcoding.

decode() reads a table region into records keyed by header name; encode()
lays records out as lines matching a FieldList. The two are deliberately
asymmetric about empties: decode omits empty cells from a record, encode pads
missing fields with "".
"""

__all__ = [
    "decode",
    "encode",
    "validate_records",
]

logger = logging.getLogger(__name__)


def validate_records(records: Any) -> list[Mapping[str, Any]]:
    """Check that ``records`` is a sequence of mappings and return it as a list."""
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Sequence):
        raise InvalidParametersError(
            f"records must be a sequence of mappings, got {type(records).__name__}"
        )
    for i, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise InvalidParametersError(
                f"record {i} must be a mapping, got {type(record).__name__}"
            )
    return list(records)


def cell_value(record: Mapping[str, Any], name: str) -> Any:
    """Value written for an explicitly supplied field; None becomes a blank cell."""
    value = record[name]
    return "" if value is None else value


def encode(records: Sequence[Mapping[str, Any]], fields: FieldList) -> list[list[Any]]:
    """Lay out records as lines of ``fields.width`` cells.

    Fields absent from a record, and blank header slots, are written as "".
    Record keys that are not header names are dropped.
    """
    lines: list[list[Any]] = []
    for record in validate_records(records):
        line: list[Any] = [""] * fields.width
        for f in fields:
            if f.name in record:
                line[f.offset] = cell_value(record, f.name)
        lines.append(line)
    return lines


def _is_date(value: Any) -> bool:
    return isinstance(value, (date, datetime, time))


def _json_default(value: Any) -> str:
    return value.isoformat() if hasattr(value, "isoformat") else str(value)


def decode(
    grid: GridAccessor,
    table: str,
    header_line: int = 1,
    start_line: int = 3,
    options: ReadOptions | None = None,
) -> DecodeResult:
    """Decode a table region into records.

    Steps:
    1. Resolve fields from the header line
    2. Bound the data extent by the last populated line
    3. Read values (and display text when date display is enabled)
    4. Drop lines with no value in any cell
    5. Map each surviving line onto the fields
    """
    opts = options or ReadOptions()
    if not isinstance(start_line, int) or start_line < 1:
        raise InvalidParametersError(f"start line must be a positive int, got {start_line!r}")

    oriented = OrientedGrid(grid, table, pivot=opts.pivot)
    cap = None if opts.pivot else opts.last_column
    fields = resolve_fields(oriented, header_line, last_position=cap, strict=opts.strict_headers)

    last_line = oriented.last_line(start_line)
    if last_line < start_line or (opts.pivot and not _line_has_content(oriented, start_line, last_line)):
        logger.info("The table '%s' is empty.", table)
        return DecodeResult.empty(table, DecodeStatus.NO_DATA, fields.names)

    n_lines = last_line - start_line + 1
    if opts.pivot:
        width = oriented.header_width()
    else:
        width = max(fields.width, 0)
    values = oriented.read_lines(start_line, n_lines, width, CellVariant.VALUE)
    display = None
    if opts.use_display_dates:
        display = oriented.read_lines(start_line, n_lines, width, CellVariant.DISPLAY)

    lines: list[LineRecord] = []
    for i, line in enumerate(values):
        if all(is_blank(v) for v in line):
            continue
        record: dict[str, Any] = {}
        for f in fields:
            if f.offset >= len(line):
                continue
            value = line[f.offset]
            if _is_date(value) and display is not None:
                record[f.name] = display[i][f.offset]
            elif not is_blank(value):
                record[f.name] = value
        lines.append(LineRecord(line_number=start_line + i, values=record))

    if not lines:
        logger.info("The table '%s' is empty.", table)
        return DecodeResult.empty(table, DecodeStatus.EMPTY, fields.names)

    if not opts.mute:
        for lr in lines:
            logger.info(
                "%s %d: %s",
                oriented.axis.capitalize(),
                lr.line_number,
                json.dumps(lr.values, ensure_ascii=False, default=_json_default),
            )

    return DecodeResult(status=DecodeStatus.RECORDS, table=table, lines=lines, field_names=fields.names)


def _line_has_content(oriented: OrientedGrid, start_line: int, last_line: int) -> bool:
    # last_populated_column falls back to start_line itself when nothing is
    # found, so in pivot mode an empty start column must be checked.
    if last_line != start_line:
        return True
    width = oriented.header_width()
    line = oriented.read_lines(start_line, 1, width)[0] if width > 0 else []
    return any(not is_blank(v) for v in line)
