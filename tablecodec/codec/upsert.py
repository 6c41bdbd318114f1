from __future__ import annotations

import logging
from collections.abc import Hashable, Mapping, Sequence
from typing import Any

from ..errors import FieldNotFoundError, InvalidParametersError
from ..grid.accessor import GridAccessor
from ..grid.oriented import OrientedGrid
from ..logging.issue_log import IssueLogBuffer
from ..models.issue_record import IssueRecord
from ..models.operation_result import FindUpdateResult, UpsertResult
from ..store.base import is_blank
from .headers import resolve_fields
from .records import cell_value, encode, validate_records

"""Keyed writes: upsert and find-and-update.

Both match incoming records to existing lines by the value of one field.
When the same match value appears on several existing lines, the first line
(lowest line number) is the match; later duplicates are left alone.
"""

__all__ = [
    "upsert_records",
    "find_and_update",
    "index_lines",
    "match_key",
]

logger = logging.getLogger(__name__)


def match_key(value: Any) -> Hashable | None:
    """Lookup key for a match value; None for blanks.

    Booleans are tagged so True and 1 (False and 0) stay distinct keys.
    """
    if is_blank(value):
        return None
    if not isinstance(value, Hashable):
        value = repr(value)
    return (isinstance(value, bool), value)


def index_lines(oriented: OrientedGrid, match_offset: int, start_line: int, last_line: int) -> dict[Hashable, int]:
    """Map each non-empty match value to the first line carrying it."""
    if last_line < start_line:
        return {}
    values = oriented.read_position(start_line, last_line - start_line + 1, match_offset)
    index: dict[Hashable, int] = {}
    for i, value in enumerate(values):
        key = match_key(value)
        if key is not None:
            index.setdefault(key, start_line + i)
    return index


def _check_match_field(match_field: Any) -> str:
    if not isinstance(match_field, str) or not match_field:
        raise InvalidParametersError(f"match field must be a non-empty string, got {match_field!r}")
    return match_field


def upsert_records(
    grid: GridAccessor,
    table: str,
    records: Sequence[Mapping[str, Any]],
    match_field: str,
    header_line: int = 1,
    start_line: int | None = None,
    pivot: bool = False,
) -> UpsertResult:
    """Update lines whose ``match_field`` value matches a record, append the rest.

    Updates write only the record's own fields, one cell at a time, at the
    matched line. Inserts are appended after the last populated line in one
    block write, padded like encode().

    Raises:
        InvalidParametersError: ``match_field`` is not a string or records are malformed
        FieldNotFoundError: ``match_field`` is not a header name
        TableNotFoundError: Unknown table
    """
    _check_match_field(match_field)
    rows = validate_records(records)
    if not rows:
        logger.info("No data to upsert into '%s'.", table)
        return UpsertResult(table=table, updated=0, inserted=0)

    first_data = start_line if start_line is not None else header_line + 1
    oriented = OrientedGrid(grid, table, pivot=pivot)
    fields = resolve_fields(oriented, header_line)
    match_offset = fields.offset_of(match_field)
    if match_offset is None:
        raise FieldNotFoundError(match_field, table)

    last_line = oriented.last_line(first_data)
    existing = index_lines(oriented, match_offset, first_data, last_line)

    updates: list[tuple[int, Mapping[str, Any]]] = []
    inserts: list[Mapping[str, Any]] = []
    for record in rows:
        key = match_key(record.get(match_field))
        if key is None or key not in existing:
            inserts.append(record)
        else:
            updates.append((existing[key], record))

    for line, record in updates:
        for name in record:
            offset = fields.offset_of(name)
            if offset is not None:
                oriented.write_cell(line, offset, cell_value(record, name))
    if updates:
        logger.info("Updated %d existing %ss in '%s'.", len(updates), oriented.axis, table)
    else:
        logger.info("No existing %ss matched for update in '%s'.", oriented.axis, table)

    first_insert: int | None = None
    if inserts:
        first_insert = last_line + 1
        oriented.write_lines(first_insert, encode(inserts, fields))
        logger.info("Appended %d new records to '%s' from %s %d.", len(inserts), table, oriented.axis, first_insert)
    else:
        logger.info("No new records to append to '%s'.", table)

    return UpsertResult(
        table=table,
        updated=len(updates),
        inserted=len(inserts),
        updated_lines=[line for line, _ in updates],
        first_insert_line=first_insert,
    )


def find_and_update(
    grid: GridAccessor,
    table: str,
    records: Sequence[Mapping[str, Any]],
    match_field: str,
    fields_to_update: Sequence[str],
    header_line: int = 1,
    start_line: int | None = None,
    issue_log: IssueLogBuffer | None = None,
) -> FindUpdateResult:
    """Update named fields on lines matched by ``match_field``; never inserts.

    Requested fields missing from the header are skipped with a warning and
    the remaining fields are still processed. Each target field costs one
    read and one write over the whole data extent. A record that does not
    carry a target field leaves that cell as it is.

    A failure partway through leaves the fields already written committed.
    """
    _check_match_field(match_field)
    rows = validate_records(records)
    if isinstance(fields_to_update, (str, bytes)) or not isinstance(fields_to_update, Sequence):
        raise InvalidParametersError("fields to update must be a sequence of field names")
    if not all(isinstance(name, str) for name in fields_to_update):
        raise InvalidParametersError("fields to update must all be strings")

    first_data = start_line if start_line is not None else header_line + 1
    oriented = OrientedGrid(grid, table)
    fields = resolve_fields(oriented, header_line)
    match_offset = fields.offset_of(match_field)
    if match_offset is None:
        raise FieldNotFoundError(match_field, table)

    targets: list[tuple[str, int]] = []
    skipped: list[str] = []
    warnings: list[str] = []
    for name in fields_to_update:
        offset = fields.offset_of(name)
        if offset is None:
            msg = f"Column '{name}' does not exist in '{table}'. Skipping this column."
            logger.warning(msg)
            skipped.append(name)
            warnings.append(msg)
            if issue_log is not None:
                issue_log.append(IssueRecord.create(table, -1, "FIELD_NOT_FOUND", msg))
        else:
            targets.append((name, offset))

    last_line = oriented.last_line(first_data)
    if not targets or last_line < first_data:
        if not targets:
            logger.info("No valid fields to update in '%s'.", table)
        return FindUpdateResult(table=table, skipped_fields=skipped, warnings=warnings)

    # Later records win when the input repeats a match value.
    lookup: dict[Hashable, Mapping[str, Any]] = {}
    for record in rows:
        key = match_key(record.get(match_field))
        if key is not None:
            lookup[key] = record

    existing = index_lines(oriented, match_offset, first_data, last_line)
    matched = sorted(
        ((line, lookup[key]) for key, line in existing.items() if key in lookup), key=lambda m: m[0]
    )
    if not matched:
        logger.info("No matching %ss found to update in '%s'.", oriented.axis, table)
        return FindUpdateResult(table=table, skipped_fields=skipped, warnings=warnings)

    n_lines = last_line - first_data + 1
    for name, offset in targets:
        column = oriented.read_position(first_data, n_lines, offset)
        for line, record in matched:
            if name in record:
                column[line - first_data] = cell_value(record, name)
        oriented.write_position(first_data, offset, column)

    updated_fields = [name for name, _ in targets]
    logger.info("Updated %d %ss for fields: %s", len(matched), oriented.axis, ", ".join(updated_fields))
    return FindUpdateResult(
        table=table,
        matched_lines=[line for line, _ in matched],
        updated_fields=updated_fields,
        skipped_fields=skipped,
        warnings=warnings,
    )
