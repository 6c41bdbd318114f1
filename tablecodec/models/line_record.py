from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""LineRecord model.

A LineRecord is one decoded record together with the 1-based row (normal
orientation) or column (pivot orientation) it was read from.
"""

__all__ = [
    "LineRecord",
]


@dataclass(frozen=True)
class LineRecord:
    line_number: int  # 1-based row or column in the table
    values: dict[str, Any]  # field name -> value; empty cells are omitted
