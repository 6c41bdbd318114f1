"""Tabular transcoding: header resolution, record codec, write modes, keyed writes."""

from .headers import column_index, resolve_fields
from .records import decode, encode, validate_records
from .sheet_ops import (
    clear_from_line,
    column_letter,
    delete_field_contents,
    format_fields_as_text,
    move_matching_line,
    update_matching_line,
)
from .upsert import find_and_update, upsert_records
from .writer import write_records

__all__ = [
    "resolve_fields",
    "decode",
    "encode",
    "validate_records",
    "write_records",
    "upsert_records",
    "find_and_update",
    "clear_from_line",
    "delete_field_contents",
    "update_matching_line",
    "move_matching_line",
    "format_fields_as_text",
    "column_index",
    "column_letter",
]
