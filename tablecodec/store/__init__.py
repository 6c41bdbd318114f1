from .base import CellVariant, TableStore, is_blank
from .memory import MemoryTableStore
from .workbook import WorkbookTableStore

__all__ = [
    "CellVariant",
    "TableStore",
    "is_blank",
    "MemoryTableStore",
    "WorkbookTableStore",
]
