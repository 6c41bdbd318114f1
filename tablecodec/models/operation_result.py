from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .options import WriteMode

"""Result models for write operations and batch job runs."""

__all__ = [
    "WriteResult",
    "UpsertResult",
    "FindUpdateResult",
    "JobStat",
    "RunResult",
]


@dataclass(frozen=True)
class WriteResult:
    table: str
    mode: WriteMode
    lines_written: int
    first_line: int  # first line written (or that would have been written)
    formulas_restored: int = 0


@dataclass(frozen=True)
class UpsertResult:
    table: str
    updated: int
    inserted: int
    updated_lines: list[int] = field(default_factory=list)
    first_insert_line: int | None = None


@dataclass(frozen=True)
class FindUpdateResult:
    """Outcome of a find-and-update call.

    ``skipped_fields`` lists requested fields missing from the header; each
    has a matching entry in ``warnings``.
    """
    table: str
    matched_lines: list[int] = field(default_factory=list)
    updated_fields: list[str] = field(default_factory=list)
    skipped_fields: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class JobStat:
    """Per-job statistics for a batch run."""
    index: int  # 1-based position in the job list
    op: str
    table: str
    status: str  # success/failed
    lines_read: int = 0
    lines_written: int = 0
    updated: int = 0
    inserted: int = 0
    skipped_fields: int = 0
    elapsed_seconds: float = 0.0
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    success_jobs: int
    failed_jobs: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    job_stats: list[JobStat] = field(default_factory=list)

    @property
    def total_jobs(self) -> int:
        return self.success_jobs + self.failed_jobs

    def total(self, attr: str) -> int:
        """Sum an integer JobStat attribute over all jobs."""
        return sum(getattr(s, attr) for s in self.job_stats)
