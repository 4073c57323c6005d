"""
Pydantic models for request/response validation.
"""
from .task_models import (
    TaskStatus,
    Priority,
    TaskCreate,
    Task,
    TaskStatistics,
    TERMINAL_STATUSES,
    TIMESTAMP_FORMAT,
    parse_timestamp,
    format_timestamp,
    utc_now,
)

__all__ = [
    "TaskStatus",
    "Priority",
    "TaskCreate",
    "Task",
    "TaskStatistics",
    "TERMINAL_STATUSES",
    "TIMESTAMP_FORMAT",
    "parse_timestamp",
    "format_timestamp",
    "utc_now",
]
