from __future__ import annotations

import pytest

from tablecodec.codec.headers import column_index, resolve_fields
from tablecodec.errors import DuplicateHeaderError, InvalidParametersError
from tablecodec.grid.accessor import GridAccessor
from tablecodec.grid.oriented import OrientedGrid
from tablecodec.store.memory import MemoryTableStore


def _oriented(rows, pivot: bool = False) -> OrientedGrid:
    store = MemoryTableStore()
    store.add_table("T", rows)
    return OrientedGrid(GridAccessor(store), "T", pivot=pivot)


def test_blank_headers_keep_their_slot():
    fields = resolve_fields(_oriented([["Name", "", "Age"]]), 1)
    assert fields.names == ["Name", "Age"]
    assert [f.offset for f in fields] == [0, 2]
    assert fields.width == 3


def test_non_string_headers_are_stringified():
    fields = resolve_fields(_oriented([[2024, "Total"]]), 1)
    assert fields.names == ["2024", "Total"]


def test_empty_header_line_gives_empty_field_list():
    fields = resolve_fields(_oriented([]), 1)
    assert len(fields) == 0 and fields.width == 0


def test_last_position_caps_header_span():
    oriented = _oriented([["A", "B", "C", "D"]])
    assert resolve_fields(oriented, 1, last_position=2).names == ["A", "B"]
    assert resolve_fields(oriented, 1, last_position="C").names == ["A", "B", "C"]


def test_pivot_header_is_a_column():
    fields = resolve_fields(_oriented([["Name", "", "Alice"], ["Age", "", 30]], pivot=True), 1)
    assert fields.names == ["Name", "Age"]


def test_duplicate_headers_alias_by_default():
    fields = resolve_fields(_oriented([["Id", "Id", "Name"]]), 1)
    assert fields.names == ["Id", "Id", "Name"]
    assert fields.offset_of("Id") == 0


def test_duplicate_headers_rejected_when_strict():
    with pytest.raises(DuplicateHeaderError):
        resolve_fields(_oriented([["Id", "Id"]]), 1, strict=True)


@pytest.mark.parametrize("header_line", [0, -1, "1", None])
def test_invalid_header_line(header_line):
    with pytest.raises(InvalidParametersError):
        resolve_fields(_oriented([["A"]]), header_line)


@pytest.mark.parametrize("value,expected", [(1, 1), ("A", 1), ("ab", 28), (" L ", 12)])
def test_column_index(value, expected):
    assert column_index(value) == expected


@pytest.mark.parametrize("value", [0, True, "1A", "", 2.5])
def test_column_index_rejects(value):
    with pytest.raises(InvalidParametersError):
        column_index(value)
