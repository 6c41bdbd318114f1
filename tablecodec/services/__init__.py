from .orchestrator import JobError, dump_records, load_records, run_job, run_jobs
from .progress import ProgressTracker
from .summary import render_summary_line

__all__ = [
    "JobError",
    "run_jobs",
    "run_job",
    "load_records",
    "dump_records",
    "ProgressTracker",
    "render_summary_line",
]
