from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

__all__ = [
    "Field",
    "FieldList",
]


@dataclass(frozen=True)
class Field:
    """A named header entry and its 0-based position in the header line."""
    name: str
    offset: int


@dataclass(frozen=True)
class FieldList:
    """Ordered fields resolved from one header row or column.

    ``width`` is the length of the original header line, blank entries
    included, so encoded lines line up with the header cells.
    """
    fields: tuple[Field, ...] = ()
    width: int = 0
    header_line: int = 1
    _first: dict[str, int] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        for f in self.fields:
            self._first.setdefault(f.name, f.offset)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name: object) -> bool:
        return name in self._first

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def offset_of(self, name: str) -> int | None:
        """Offset of the first header carrying ``name``."""
        return self._first.get(name)
