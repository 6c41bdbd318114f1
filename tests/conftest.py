# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from tablecodec.grid.accessor import GridAccessor
from tablecodec.logging.init import reset_logging
from tablecodec.store.memory import MemoryTableStore

PEOPLE_ROWS = [
    ["Name", "Age"],
    [],
    ["Alice", 30],
    ["Bob", 25],
]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("TABLECODEC_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def people_store() -> MemoryTableStore:
    """Header [Name, Age] on row 1, data from row 3: Alice 30, Bob 25."""
    store = MemoryTableStore()
    store.add_table("People", PEOPLE_ROWS)
    return store


@pytest.fixture()
def people_grid(people_store: MemoryTableStore) -> GridAccessor:
    return GridAccessor(people_store)


@pytest.fixture()
def people_xlsx(temp_workdir: Path) -> Path:
    """Workbook with a People sheet laid out like ``people_store``."""
    path = temp_workdir / "data" / "book.xlsx"
    df = pd.DataFrame([[None, None], ["Alice", 30], ["Bob", 25]], columns=["Name", "Age"], dtype=object)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="People", index=False)
    return path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """workbook: ./data/book.xlsx
logs_dir: ./logs
read:
  header_line: 1
  start_line: 3
write:
  header_line: 1
  start_line: 3
  mode: overwrite
jobs:
  - {op: upsert, table: People, input: ./data/upsert.json, match: Name}
  - {op: find_update, table: People, input: ./data/ages.json, match: Name, fields: [Age, Email]}
  - {op: read, table: People, output: ./data/out.json}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "tablecodec.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_json(temp_workdir: Path):
    def _write(name: str, data) -> Path:
        path = temp_workdir / "data" / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write
