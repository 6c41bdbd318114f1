"""Spreadsheet table <-> record transcoder.

Reads a rectangular table region into records keyed by header names and
writes records back with overwrite, append or overlay semantics, in row or
pivoted (column) orientation.
"""

from .codec import (
    clear_from_line,
    decode,
    delete_field_contents,
    encode,
    find_and_update,
    format_fields_as_text,
    move_matching_line,
    resolve_fields,
    update_matching_line,
    upsert_records,
    write_records,
)
from .errors import (
    DuplicateHeaderError,
    FieldNotFoundError,
    InvalidModeError,
    InvalidParametersError,
    NotFoundError,
    TableNotFoundError,
    TranscodeError,
)
from .grid import GridAccessor
from .models import (
    DecodeResult,
    DecodeStatus,
    FindUpdateResult,
    ReadOptions,
    UpsertResult,
    WriteMode,
    WriteOptions,
    WriteResult,
)
from .store import MemoryTableStore, TableStore, WorkbookTableStore

__version__ = "0.1.0"

__all__ = [
    "GridAccessor",
    "TableStore",
    "MemoryTableStore",
    "WorkbookTableStore",
    "resolve_fields",
    "decode",
    "encode",
    "write_records",
    "upsert_records",
    "find_and_update",
    "clear_from_line",
    "delete_field_contents",
    "update_matching_line",
    "move_matching_line",
    "format_fields_as_text",
    "ReadOptions",
    "WriteOptions",
    "WriteMode",
    "DecodeResult",
    "DecodeStatus",
    "WriteResult",
    "UpsertResult",
    "FindUpdateResult",
    "TranscodeError",
    "NotFoundError",
    "TableNotFoundError",
    "FieldNotFoundError",
    "InvalidModeError",
    "InvalidParametersError",
    "DuplicateHeaderError",
]
