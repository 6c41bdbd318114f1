from __future__ import annotations

import re
from datetime import UTC, datetime

from tablecodec.models.operation_result import JobStat, RunResult
from tablecodec.services.summary import render_summary_line

"""SUMMARY line format contract."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+jobs=([0-9]+)/(\1)\s+success=([0-9]+)\s+failed=([0-9]+)\s+"
    r"lines_read=([0-9]+)\s+lines_written=([0-9]+)\s+updated=([0-9]+)\s+"
    r"inserted=([0-9]+)\s+skipped_fields=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def test_summary_pattern_example_line():
    line = (
        "SUMMARY jobs=3/3 success=2 failed=1 lines_read=4 lines_written=2 "
        "updated=1 inserted=1 skipped_fields=0 elapsed_sec=0.84"
    )
    assert SUMMARY_PATTERN.match(line)


def test_rendered_line_matches_contract():
    t = datetime(2024, 1, 1, tzinfo=UTC)
    for elapsed in (0, 0.0001, 0.5, 3.0, 12.3456):
        result = RunResult(
            success_jobs=1,
            failed_jobs=1,
            start_time=t,
            end_time=t,
            elapsed_seconds=elapsed,
            job_stats=[
                JobStat(1, "read", "T", "success", lines_read=5),
                JobStat(2, "write", "T", "failed", error="boom"),
            ],
        )
        line = render_summary_line(result)
        m = SUMMARY_PATTERN.match(line)
        assert m, line
        assert m.group(1) == "2" and m.group(5) == "5"
