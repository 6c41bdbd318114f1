from __future__ import annotations

"""Exception taxonomy for the tabular transcoder.

All of these are fatal for the call that raises them: they propagate to the
immediate caller, are never retried, and nothing already written is rolled
back. Empty decode results and skipped fields are not errors (see
``DecodeResult`` and ``FindUpdateResult``).
"""

__all__ = [
    "TranscodeError",
    "NotFoundError",
    "TableNotFoundError",
    "FieldNotFoundError",
    "InvalidModeError",
    "InvalidParametersError",
    "DuplicateHeaderError",
]


class TranscodeError(Exception):
    """Base exception for transcoding errors."""


class NotFoundError(TranscodeError):
    """A named table, field or header is absent."""


class TableNotFoundError(NotFoundError):
    def __init__(self, table: str) -> None:
        super().__init__(f"table not found: {table}")
        self.table = table


class FieldNotFoundError(NotFoundError):
    def __init__(self, field: str, table: str | None = None) -> None:
        where = f" in table '{table}'" if table else ""
        super().__init__(f"field '{field}' not found in headers{where}")
        self.field = field
        self.table = table


class InvalidModeError(TranscodeError):
    """Raised for an unrecognized write-mode string."""


class InvalidParametersError(TranscodeError):
    """Raised when a required argument is missing or has the wrong shape."""


class DuplicateHeaderError(TranscodeError):
    """Raised by strict header resolution when two headers share a name."""
