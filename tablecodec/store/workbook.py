from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import openpyxl
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import TableNotFoundError
from .base import CellVariant, is_blank
from .memory import render_display

"""openpyxl-backed table store.

Worksheets are tables. openpyxl keeps formulas as cell values starting with
"=" and does not evaluate them, so the value variant of a formula cell comes
from a companion workbook loaded with ``data_only=True`` (Excel's cached
results) when the store was opened from a file; otherwise the formula text is
returned as the value.
"""

__all__ = [
    "WorkbookTableStore",
    "excel_format_to_strftime",
]

# Longest tokens first so "yyyy" wins over "yy".
_DATE_TOKENS = [
    ("yyyy", "%Y"),
    ("yy", "%y"),
    ("dd", "%d"),
    ("hh", "%H"),
    ("ss", "%S"),
    ("d", "%d"),
    ("h", "%H"),
]
_TOKEN_RE = re.compile(r"yyyy|yy|mmmm|mmm|mm|m|dd|d|hh|h|ss|am/pm", re.IGNORECASE)


def excel_format_to_strftime(number_format: str | None) -> str | None:
    """Translate a simple Excel date number format into a strftime pattern.

    Returns None for "General" and formats without date/time tokens. "mm"
    directly after an hour token means minutes, as in Excel.
    """
    if not number_format or number_format == "General":
        return None
    fmt = number_format.split(";")[0].replace("\\", "").replace('"', "")
    fmt = re.sub(r"\[[^\]]*\]", "", fmt)
    if not _TOKEN_RE.search(fmt):
        return None

    out: list[str] = []
    prev_hour = False
    pos = 0
    for m in _TOKEN_RE.finditer(fmt):
        out.append(fmt[pos:m.start()])
        tok = m.group(0).lower()
        if tok in ("mm", "m"):
            out.append("%M" if prev_hour else "%m")
        elif tok == "mmm":
            out.append("%b")
        elif tok == "mmmm":
            out.append("%B")
        elif tok == "am/pm":
            out.append("%p")
        else:
            out.append(dict(_DATE_TOKENS)[tok])
        prev_hour = tok in ("hh", "h")
        pos = m.end()
    out.append(fmt[pos:])
    return "".join(out)


class WorkbookTableStore:
    """TableStore over an openpyxl Workbook."""

    def __init__(self, workbook: Workbook, *, path: Path | None = None, cached: Workbook | None = None) -> None:
        self.workbook = workbook
        self.path = path
        self._cached = cached

    @classmethod
    def open(cls, path: Path | str) -> WorkbookTableStore:
        path = Path(path)
        wb = openpyxl.load_workbook(path)
        cached = openpyxl.load_workbook(path, data_only=True)
        return cls(wb, path=path, cached=cached)

    @classmethod
    def new(cls, tables: Sequence[str] = ("Sheet1",)) -> WorkbookTableStore:
        wb = openpyxl.Workbook()
        wb.active.title = tables[0]
        for name in tables[1:]:
            wb.create_sheet(name)
        return cls(wb)

    def save(self, path: Path | str | None = None) -> Path:
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("no path to save workbook to")
        self.workbook.save(target)
        self.path = target
        return target

    def _sheet(self, table: str) -> Worksheet:
        if table not in self.workbook.sheetnames:
            raise TableNotFoundError(table)
        return self.workbook[table]

    def _cached_value(self, table: str, row: int, col: int) -> Any:
        if self._cached is None or table not in self._cached.sheetnames:
            return None
        return self._cached[table].cell(row=row, column=col).value

    def _face(self, table: str, cell: Any, variant: CellVariant) -> Any:
        value = cell.value
        is_formula = cell.data_type == "f"
        if variant is CellVariant.FORMULA:
            return str(value) if is_formula else ""
        if is_formula:
            cached = self._cached_value(table, cell.row, cell.column)
            value = value if cached is None else cached
        if variant is CellVariant.DISPLAY:
            fmt = None
            if isinstance(value, (date, datetime, time)):
                fmt = excel_format_to_strftime(cell.number_format)
            return render_display(value, fmt)
        return "" if value is None else value

    def _used_cells(self, ws: Worksheet, row: int, col: int, n_rows: int, n_cols: int) -> Iterator[Any]:
        """Cells of the region that lie inside the sheet's used range."""
        # iter_rows() creates the cells it visits, so stay inside max_row/max_column.
        last_row = min(row + n_rows - 1, ws.max_row)
        last_col = min(col + n_cols - 1, ws.max_column)
        if last_row < row or last_col < col:
            return
        for cells in ws.iter_rows(min_row=row, max_row=last_row, min_col=col, max_col=last_col):
            yield from cells

    # --- TableStore -------------------------------------------------

    def has_table(self, table: str) -> bool:
        return table in self.workbook.sheetnames

    def dimensions(self, table: str) -> tuple[int, int]:
        ws = self._sheet(table)
        last_row = last_col = 0
        # max_row/max_column also count styled empty cells; scan for content.
        for cell in self._used_cells(ws, 1, 1, ws.max_row, ws.max_column):
            if not is_blank(cell.value):
                last_row = max(last_row, cell.row)
                last_col = max(last_col, cell.column)
        return last_row, last_col

    def get_block(
        self, table: str, row: int, col: int, n_rows: int, n_cols: int, variant: CellVariant
    ) -> list[list[Any]]:
        ws = self._sheet(table)
        block: list[list[Any]] = [[""] * n_cols for _ in range(n_rows)]
        for cell in self._used_cells(ws, row, col, n_rows, n_cols):
            block[cell.row - row][cell.column - col] = self._face(table, cell, variant)
        return block

    def set_block(self, table: str, row: int, col: int, matrix: Sequence[Sequence[Any]]) -> None:
        ws = self._sheet(table)
        for i, values in enumerate(matrix):
            for j, value in enumerate(values):
                ws.cell(row=row + i, column=col + j).value = None if is_blank(value) else value

    def set_formula(self, table: str, row: int, col: int, formula: str) -> None:
        ws = self._sheet(table)
        ws.cell(row=row, column=col).value = formula if formula.startswith("=") else f"={formula}"

    def clear_block(self, table: str, row: int, col: int, n_rows: int, n_cols: int) -> None:
        ws = self._sheet(table)
        for cell in self._used_cells(ws, row, col, n_rows, n_cols):
            # Merged cells are read-only and always None.
            if cell.value is not None:
                cell.value = None

    def delete_rows(self, table: str, row: int, n_rows: int) -> None:
        self._sheet(table).delete_rows(row, n_rows)
        if self._cached is not None and table in self._cached.sheetnames:
            self._cached[table].delete_rows(row, n_rows)

    def delete_cols(self, table: str, col: int, n_cols: int) -> None:
        self._sheet(table).delete_cols(col, n_cols)
        if self._cached is not None and table in self._cached.sheetnames:
            self._cached[table].delete_cols(col, n_cols)

    def set_number_format(
        self, table: str, row: int, col: int, n_rows: int, n_cols: int, number_format: str
    ) -> None:
        ws = self._sheet(table)
        for r in range(row, row + n_rows):
            for c in range(col, col + n_cols):
                ws.cell(row=r, column=c).number_format = number_format
