from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""IssueRecord model for the JSON Lines issue log.

An issue is a non-fatal event worth keeping after the run, such as a
requested field that was skipped because the header does not carry it.
"""

__all__ = [
    "IssueRecord",
]


@dataclass(frozen=True)
class IssueRecord:
    """Structured issue record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        table: Table the operation ran against
        line: 1-based line number, or -1 when the issue is not tied to a line
        issue_type: Classification in UPPER_SNAKE_CASE
        message: Human readable description
    """
    timestamp: str
    table: str
    line: int
    issue_type: str
    message: str

    @staticmethod
    def create(table: str, line: int, issue_type: str, message: str) -> IssueRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueRecord(
            timestamp=ts,
            table=table,
            line=line,
            issue_type=issue_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
