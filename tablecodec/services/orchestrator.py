from __future__ import annotations

import json
import logging
import time
from dataclasses import replace
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

from openpyxl.utils.exceptions import InvalidFileException

from ..codec.records import decode
from ..codec.sheet_ops import clear_from_line
from ..codec.upsert import find_and_update, upsert_records
from ..codec.writer import write_records
from ..config.loader import AppConfig, JobConfig
from ..errors import TranscodeError
from ..grid.accessor import GridAccessor
from ..logging.issue_log import IssueLogBuffer
from ..models.decode_result import DecodeResult
from ..models.issue_record import IssueRecord
from ..models.operation_result import JobStat, RunResult
from ..store.base import TableStore
from ..store.workbook import WorkbookTableStore
from .progress import ProgressTracker

"""Batch job orchestration.

run_jobs() executes the ``jobs`` list of a config against one workbook:

1. Open the workbook (or use the store handed in)
2. Run each job in order; a failing job is recorded and the run continues
3. Flush the issue log
4. Save the workbook once if at least one write-type job succeeded
"""

__all__ = [
    "JobError",
    "run_jobs",
    "run_job",
    "open_workbook",
    "load_records",
    "dump_records",
    "WRITE_OPS",
]

logger = logging.getLogger(__name__)

WRITE_OPS = frozenset({"write", "upsert", "find_update", "clear"})


class JobError(Exception):
    """Fatal error for a job or for the whole run (unreadable input, missing workbook)."""


def load_records(path: Path | str) -> list[dict[str, Any]]:
    """Load a JSON array of objects from ``path``."""
    path = Path(path)
    if not path.exists():
        raise JobError(f"input file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise JobError(f"invalid json in {path}: {e}") from e
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise JobError(f"{path} must contain a JSON array of objects")
    return data


def _json_default(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def dump_records(result: DecodeResult, path: Path | str) -> Path:
    """Write decoded records to ``path`` as JSON, or CSV when the suffix is .csv."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        result.to_frame().to_csv(path, encoding="utf-8")
    else:
        path.write_text(
            json.dumps(result.records, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )
    return path


def run_job(
    job: JobConfig,
    grid: GridAccessor,
    config: AppConfig,
    issue_log: IssueLogBuffer | None = None,
) -> dict[str, int]:
    """Run one job and return its counters (lines_read, lines_written, ...)."""
    stats = {"lines_read": 0, "lines_written": 0, "updated": 0, "inserted": 0, "skipped_fields": 0}

    if job.op == "read":
        layout = config.read_layout
        opts = config.read if job.pivot is None else replace(config.read, pivot=job.pivot)
        result = decode(
            grid,
            job.table,
            header_line=job.header_line or layout.header_line,
            start_line=job.start_line or layout.start_line,
            options=opts,
        )
        stats["lines_read"] = len(result)
        if job.output:
            out = dump_records(result, job.output)
            logger.info("wrote %d records to %s", len(result), out)
        return stats

    layout = config.write_layout
    header_line = job.header_line or layout.header_line
    start_line = job.start_line or layout.start_line
    pivot = config.write.pivot if job.pivot is None else job.pivot

    if job.op == "clear":
        stats["lines_written"] = clear_from_line(grid, job.table, start_line=start_line, pivot=pivot)
        return stats

    if job.input is None:
        raise JobError(f"job '{job.op}' on '{job.table}' has no input file")
    records = load_records(job.input)

    if job.op == "write":
        opts = replace(config.write, pivot=pivot, mode=job.mode or config.write.mode)
        written = write_records(
            grid,
            job.table,
            records,
            header_line=header_line,
            start_line=start_line,
            options=opts,
        )
        stats["lines_written"] = written.lines_written
    elif job.op == "upsert":
        upserted = upsert_records(
            grid,
            job.table,
            records,
            job.match,
            header_line=header_line,
            start_line=start_line,
            pivot=pivot,
        )
        stats["updated"] = upserted.updated
        stats["inserted"] = upserted.inserted
        stats["lines_written"] = upserted.updated + upserted.inserted
    elif job.op == "find_update":
        found = find_and_update(
            grid,
            job.table,
            records,
            job.match,
            job.fields,
            header_line=header_line,
            start_line=start_line,
            issue_log=issue_log,
        )
        stats["updated"] = len(found.matched_lines)
        stats["skipped_fields"] = len(found.skipped_fields)
    else:
        raise JobError(f"unknown op: {job.op}")
    return stats


def open_workbook(path: Path | str) -> WorkbookTableStore:
    """Open a workbook store, turning missing or unreadable files into JobError."""
    path = Path(path)
    if not path.exists():
        raise JobError(f"workbook not found: {path}")
    try:
        return WorkbookTableStore.open(path)
    except (InvalidFileException, BadZipFile, OSError) as e:
        raise JobError(f"cannot open workbook {path}: {e}") from e


def run_jobs(config: AppConfig, store: TableStore | None = None) -> RunResult:
    """Run every configured job and aggregate the results.

    Raises:
        JobError: The workbook cannot be opened or saved
    """
    start_time = datetime.now(UTC)
    issue_log = IssueLogBuffer(Path(config.logs_dir))

    if store is None:
        store = open_workbook(config.workbook)
    grid = GridAccessor(store)

    job_stats: list[JobStat] = []
    success = failed = 0
    wrote = False

    with ProgressTracker(len(config.jobs)) as progress:
        for index, job in enumerate(config.jobs, start=1):
            progress.start_job(f"{job.op}:{job.table}")
            t0 = time.perf_counter()
            try:
                counters = run_job(job, grid, config, issue_log)
            except (TranscodeError, JobError) as e:
                failed += 1
                logger.error("job %d (%s on '%s') failed: %s", index, job.op, job.table, e)
                issue_log.append(IssueRecord.create(job.table, -1, "JOB_FAILED", f"{type(e).__name__}: {e}"))
                job_stats.append(
                    JobStat(
                        index=index,
                        op=job.op,
                        table=job.table,
                        status="failed",
                        elapsed_seconds=time.perf_counter() - t0,
                        error=str(e),
                    )
                )
                progress.finish_job(success=False)
                continue

            success += 1
            wrote = wrote or job.op in WRITE_OPS
            job_stats.append(
                JobStat(
                    index=index,
                    op=job.op,
                    table=job.table,
                    status="success",
                    elapsed_seconds=time.perf_counter() - t0,
                    **counters,
                )
            )
            progress.finish_job(success=True)

    log_path = issue_log.flush()
    if log_path is not None:
        logger.info("issues written to %s", log_path)

    if wrote and isinstance(store, WorkbookTableStore) and store.path is not None:
        try:
            store.save()
        except OSError as e:
            raise JobError(f"failed to save workbook {store.path}: {e}") from e
        logger.info("saved %s", store.path)

    end_time = datetime.now(UTC)
    return RunResult(
        success_jobs=success,
        failed_jobs=failed,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        job_stats=job_stats,
    )
