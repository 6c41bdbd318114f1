from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..errors import InvalidModeError

"""Per-call option records for the read and write paths.

Options are passed explicitly at each call site. The defaults documented on
each field are the library defaults; the YAML config layer
(``tablecodec.config.loader``) only produces instances of these classes.
"""

__all__ = [
    "WriteMode",
    "ReadOptions",
    "WriteOptions",
]


class WriteMode(Enum):
    """Merge policy used when writing records back to a table.

    - OVERWRITE: clear the data region, write new lines from the start line
    - APPEND: write new lines after the last populated line
    - OVERLAY: merge supplied fields into existing lines, keep the rest
    """
    OVERWRITE = "overwrite"
    APPEND = "append"
    OVERLAY = "overlay"

    @classmethod
    def parse(cls, value: WriteMode | str) -> WriteMode:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        allowed = ", ".join(repr(m.value) for m in cls)
        raise InvalidModeError(f"invalid mode {value!r}; use one of {allowed}")


@dataclass(frozen=True)
class ReadOptions:
    """Options for decoding a table into records."""
    last_column: int | str | None = None  # column cap (normal orientation), 12 or "L"
    mute: bool = True  # False logs every decoded record
    use_display_dates: bool = True  # date cells yield their displayed text
    pivot: bool = False  # records are columns, fields are rows
    strict_headers: bool = False  # reject duplicate header names


@dataclass(frozen=True)
class WriteOptions:
    """Options for writing records into a table."""
    mode: WriteMode | str = WriteMode.OVERWRITE
    pivot: bool = False
    preserve_formulas: bool = True
    strict_headers: bool = False

    @property
    def write_mode(self) -> WriteMode:
        """Parsed mode; raises InvalidModeError for unknown strings."""
        return WriteMode.parse(self.mode)
