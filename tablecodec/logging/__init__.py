from .init import get_logger, log_summary, reset_logging, set_level, setup_logging
from .issue_log import IssueLogBuffer

__all__ = [
    "setup_logging",
    "get_logger",
    "log_summary",
    "set_level",
    "reset_logging",
    "IssueLogBuffer",
]
