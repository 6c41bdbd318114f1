from __future__ import annotations

import json
import re
from pathlib import Path

from tablecodec.codec.upsert import find_and_update
from tablecodec.grid.accessor import GridAccessor
from tablecodec.logging.issue_log import IssueLogBuffer

"""Issue log line contract (JSON Lines, one object per skipped field or failed job)."""

REQUIRED_KEYS = {"timestamp", "table", "line", "issue_type", "message"}
TS_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def test_skipped_field_issue_line(people_grid: GridAccessor, tmp_path: Path):
    buf = IssueLogBuffer(tmp_path)
    find_and_update(people_grid, "People", [{"Name": "Bob", "Age": 1}], "Name", ["Phone"], issue_log=buf)
    path = buf.flush()
    assert path is not None
    (line,) = path.read_text(encoding="utf-8").splitlines()
    data = json.loads(line)
    assert set(data) == REQUIRED_KEYS
    assert TS_PATTERN.match(data["timestamp"])
    assert data["table"] == "People"
    assert data["line"] == -1
    assert data["issue_type"] == "FIELD_NOT_FOUND"
    assert "Phone" in data["message"]
