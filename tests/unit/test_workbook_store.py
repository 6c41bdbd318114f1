from __future__ import annotations

from datetime import datetime, time
from pathlib import Path

import openpyxl
import pytest

from tablecodec.errors import TableNotFoundError
from tablecodec.store.base import CellVariant, TableStore
from tablecodec.store.workbook import WorkbookTableStore, excel_format_to_strftime


def test_workbook_store_satisfies_protocol():
    assert isinstance(WorkbookTableStore.new(), TableStore)


def test_new_creates_named_tables():
    store = WorkbookTableStore.new(["A", "B"])
    assert store.has_table("A") and store.has_table("B")
    assert not store.has_table("Sheet1")
    with pytest.raises(TableNotFoundError):
        store.dimensions("Sheet1")


def test_reads_do_not_grow_dimensions():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [["a", "b"]])
    store.get_block("T", 1, 1, 10, 10, CellVariant.VALUE)
    assert store.dimensions("T") == (1, 2)
    ws = store.workbook["T"]
    assert (ws.max_row, ws.max_column) == (1, 2)


def test_blank_values_are_stored_as_empty_cells():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [["a", ""], [None, "b"]])
    assert store.workbook["T"].cell(row=1, column=2).value is None
    assert store.get_block("T", 1, 1, 2, 2, CellVariant.VALUE) == [["a", ""], ["", "b"]]


def test_formula_variant_and_uncached_value():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [[1], [2]])
    store.set_formula("T", 3, 1, "SUM(A1:A2)")
    assert store.get_block("T", 1, 1, 3, 1, CellVariant.FORMULA) == [[""], [""], ["=SUM(A1:A2)"]]
    # Without a cached companion workbook the formula text stands in for the value.
    assert store.get_block("T", 3, 1, 1, 1, CellVariant.VALUE) == [["=SUM(A1:A2)"]]


def test_clear_block_keeps_number_format():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [[datetime(2024, 1, 2)]])
    store.workbook["T"].cell(row=1, column=1).number_format = "dd/mm/yyyy"
    store.clear_block("T", 1, 1, 1, 1)
    cell = store.workbook["T"].cell(row=1, column=1)
    assert cell.value is None
    assert cell.number_format == "dd/mm/yyyy"


def test_merged_cells_read_blank_and_clear_cleanly():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [["title", ""], [1, 2]])
    store.workbook["T"].merge_cells("A1:B1")
    assert store.get_block("T", 1, 1, 2, 2, CellVariant.VALUE) == [["title", ""], [1, 2]]
    store.clear_block("T", 1, 1, 2, 2)
    assert store.dimensions("T") == (0, 0)


def test_delete_rows_keeps_cached_values_aligned():
    wb = openpyxl.Workbook()
    wb.active.title = "T"
    for value in (1, "=1+1", "=2+2"):
        wb.active.append([value])
    cached = openpyxl.Workbook()
    cached.active.title = "T"
    for value in (1, 2, 4):
        cached.active.append([value])

    store = WorkbookTableStore(wb, cached=cached)
    store.delete_rows("T", 2, 1)
    assert store.dimensions("T") == (2, 1)
    assert store.get_block("T", 1, 1, 2, 1, CellVariant.VALUE) == [[1], [4]]
    assert store.get_block("T", 2, 1, 1, 1, CellVariant.FORMULA) == [["=2+2"]]


def test_delete_cols():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [["a", "b", "c"]])
    store.delete_cols("T", 2, 1)
    assert store.get_block("T", 1, 1, 1, 3, CellVariant.VALUE) == [["a", "c", ""]]


def test_set_number_format_plain_text():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [["Code"], ["007"]])
    store.set_number_format("T", 2, 1, 2, 1, "@")
    ws = store.workbook["T"]
    assert ws.cell(row=2, column=1).number_format == "@"
    assert ws.cell(row=3, column=1).number_format == "@"
    assert store.dimensions("T") == (2, 1)


def test_display_variant_uses_number_format():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [[datetime(2024, 1, 2, 13, 45)]])
    store.workbook["T"].cell(row=1, column=1).number_format = "dd/mm/yyyy hh:mm"
    assert store.get_block("T", 1, 1, 1, 1, CellVariant.DISPLAY) == [["02/01/2024 13:45"]]


def test_display_variant_renders_time_of_day():
    store = WorkbookTableStore.new(["T"])
    store.set_block("T", 1, 1, [[time(9, 30)]])
    store.workbook["T"].cell(row=1, column=1).number_format = "h:mm"
    assert store.get_block("T", 1, 1, 1, 1, CellVariant.DISPLAY) == [["09:30"]]


def test_open_and_save_round_trip(tmp_path: Path):
    path = tmp_path / "book.xlsx"
    wb = openpyxl.Workbook()
    wb.active.title = "T"
    wb.active.append(["Name", "Age"])
    wb.save(path)

    store = WorkbookTableStore.open(path)
    store.set_block("T", 2, 1, [["Alice", 30]])
    store.save()

    reopened = WorkbookTableStore.open(path)
    assert reopened.get_block("T", 1, 1, 2, 2, CellVariant.VALUE) == [["Name", "Age"], ["Alice", 30]]


def test_save_without_path_raises():
    with pytest.raises(ValueError):
        WorkbookTableStore.new().save()


@pytest.mark.parametrize(
    "fmt,expected",
    [
        ("General", None),
        (None, None),
        ("0.00", None),
        ("yyyy-mm-dd", "%Y-%m-%d"),
        ("dd/mm/yyyy", "%d/%m/%Y"),
        ("yyyy-mm-dd hh:mm:ss", "%Y-%m-%d %H:%M:%S"),
        ("d-mmm-yy", "%d-%b-%y"),
        ("[$-409]mmmm d, yyyy", "%B %d, %Y"),
    ],
)
def test_excel_format_to_strftime(fmt, expected):
    assert excel_format_to_strftime(fmt) == expected
