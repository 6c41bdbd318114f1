"""Value objects shared by the transcoder, the store adapters and the CLI."""

from .decode_result import DecodeResult, DecodeStatus
from .field_list import Field, FieldList
from .issue_record import IssueRecord
from .line_record import LineRecord
from .operation_result import FindUpdateResult, JobStat, RunResult, UpsertResult, WriteResult
from .options import ReadOptions, WriteMode, WriteOptions

__all__ = [
    # Options
    "ReadOptions",
    "WriteMode",
    "WriteOptions",
    # Header / records
    "Field",
    "FieldList",
    "LineRecord",
    "DecodeResult",
    "DecodeStatus",
    # Results
    "WriteResult",
    "UpsertResult",
    "FindUpdateResult",
    "JobStat",
    "RunResult",
    "IssueRecord",
]
