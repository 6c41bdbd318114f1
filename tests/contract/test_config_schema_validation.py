from __future__ import annotations

import json

import jsonschema
import pytest

from tablecodec.config.loader import SCHEMA_PATH

"""Config schema contract: what the bundled JSON schema accepts and rejects."""


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_schema_is_valid_draft(schema):
    jsonschema.Draft202012Validator.check_schema(schema)


@pytest.mark.parametrize("data", [
    {"workbook": "b.xlsx"},
    {"workbook": "b.xlsx", "read": {"last_column": "L"}},
    {"workbook": "b.xlsx", "read": {"last_column": 12, "pivot": True}},
    {"workbook": "b.xlsx", "write": {"mode": "append", "preserve_formulas": False}},
    {"workbook": "b.xlsx", "jobs": [
        {"op": "read", "table": "T", "output": "o.csv"},
        {"op": "clear", "table": "T", "start_line": 2},
        {"op": "find_update", "table": "T", "input": "i.json", "match": "Id", "fields": ["A"]},
    ]},
])
def test_schema_accepts(schema, data):
    jsonschema.validate(data, schema)


@pytest.mark.parametrize("data", [
    {},
    {"workbook": ""},
    {"workbook": "b.xlsx", "read": {"start_line": 0}},
    {"workbook": "b.xlsx", "read": {"last_column": "A1"}},
    {"workbook": "b.xlsx", "write": {"mode": "merge"}},
    {"workbook": "b.xlsx", "jobs": [{"op": "delete", "table": "T"}]},
    {"workbook": "b.xlsx", "jobs": [{"op": "write", "table": "T"}]},
    {"workbook": "b.xlsx", "jobs": [{"op": "find_update", "table": "T", "input": "i.json", "match": "Id"}]},
    {"workbook": "b.xlsx", "log_level": "TRACE"},
])
def test_schema_rejects(schema, data):
    with pytest.raises(jsonschema.ValidationError):
        jsonschema.validate(data, schema)
