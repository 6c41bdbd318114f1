from __future__ import annotations

from ..models.operation_result import RunResult

"""SUMMARY line rendering for batch runs."""

__all__ = [
    "render_summary_line",
    "format_elapsed",
]


def format_elapsed(seconds: float) -> str:
    """Render seconds without scientific notation; whole numbers lose the fraction."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a finished run.

    Format:
    SUMMARY jobs={total}/{total} success={s} failed={f} lines_read={r}
    lines_written={w} updated={u} inserted={i} skipped_fields={k} elapsed_sec={e}

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> render_summary_line(RunResult(1, 0, t, t, 2.0))
        'SUMMARY jobs=1/1 success=1 failed=0 lines_read=0 lines_written=0 updated=0 inserted=0 skipped_fields=0 elapsed_sec=2'
    """
    total = result.total_jobs
    return (
        f"SUMMARY jobs={total}/{total} "
        f"success={result.success_jobs} "
        f"failed={result.failed_jobs} "
        f"lines_read={result.total('lines_read')} "
        f"lines_written={result.total('lines_written')} "
        f"updated={result.total('updated')} "
        f"inserted={result.total('inserted')} "
        f"skipped_fields={result.total('skipped_fields')} "
        f"elapsed_sec={format_elapsed(result.elapsed_seconds)}"
    )
