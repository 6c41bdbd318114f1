from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import pandas as pd

from .line_record import LineRecord

"""Decode result model.

An empty table is reported through ``status`` rather than an exception so
callers can tell "no data region yet" (NO_DATA) apart from "data region
present but every line blank" (EMPTY).
"""

__all__ = [
    "DecodeStatus",
    "DecodeResult",
]


class DecodeStatus(Enum):
    RECORDS = "records"
    EMPTY = "empty"  # data region exists, no line carries a value
    NO_DATA = "no_data"  # last populated line precedes the start line


@dataclass(frozen=True)
class DecodeResult:
    status: DecodeStatus
    table: str
    lines: list[LineRecord] = field(default_factory=list)
    field_names: list[str] = field(default_factory=list)
    message: str | None = None

    @classmethod
    def empty(cls, table: str, status: DecodeStatus, field_names: list[str] | None = None) -> DecodeResult:
        return cls(
            status=status,
            table=table,
            lines=[],
            field_names=list(field_names or []),
            message=f"The table '{table}' is empty.",
        )

    @property
    def records(self) -> list[dict[str, Any]]:
        return [line.values for line in self.lines]

    @property
    def is_empty(self) -> bool:
        return self.status is not DecodeStatus.RECORDS

    def __len__(self) -> int:
        return len(self.lines)

    def to_frame(self) -> pd.DataFrame:
        """Records as a DataFrame indexed by line number, columns in header order."""
        columns = list(dict.fromkeys(self.field_names))
        frame = pd.DataFrame(self.records, columns=columns)
        frame.index = pd.Index([line.line_number for line in self.lines], name="line")
        return frame
