"""
SQLite implementation of the storage interface.
Wraps TaskDatabase and converts between rows and task models.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Any, Callable

from taskmcp.database import TaskDatabase
from taskmcp.models.task_models import (
    Task,
    TaskCreate,
    TaskStatistics,
    TaskStatus,
    Priority,
    format_timestamp,
    parse_timestamp,
    utc_now,
)
from .interface import TaskStorage


def _to_column(value: Any) -> Any:
    """Convert a model value to its stored representation."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


class SQLiteTaskStorage(TaskStorage):
    """SQLite-based task storage."""

    def __init__(self, db: TaskDatabase, clock: Callable[[], datetime] = utc_now):
        """
        Initialize SQLite storage.

        Args:
            db: TaskDatabase instance
            clock: Source of the current time (naive UTC) for created/updated timestamps
        """
        self._db = db
        self._clock = clock

    def append_batch(self, tasks: List[TaskCreate]) -> List[Task]:
        """Persist all tasks in one transaction; every row shares one creation timestamp."""
        if not tasks:
            return []
        now = format_timestamp(self._clock())
        rows = []
        for task in tasks:
            row = {column: _to_column(value) for column, value in task.model_dump().items()}
            row["created_at"] = now
            row["updated_at"] = now
            rows.append(row)

        # Tasks come from the inserted values, not a re-read
        task_ids = self._db.insert_tasks(rows)
        return [Task.from_row({**row, "id": task_id}) for row, task_id in zip(rows, task_ids)]

    def update_task(self, task_id: int, **fields: Any) -> Optional[Task]:
        """Update a task and refresh its updated_at timestamp."""
        if fields.get("due_date") is not None:
            fields["due_date"] = parse_timestamp(fields["due_date"])
        columns: Dict[str, Any] = {name: _to_column(value) for name, value in fields.items()}
        columns["updated_at"] = format_timestamp(self._clock())
        if not self._db.update_task(task_id, columns):
            return None
        return self.get_task(task_id)

    def delete_task(self, task_id: int) -> bool:
        return self._db.delete_task(task_id)

    def delete_all(self) -> int:
        return self._db.delete_all_tasks()

    def read_statistics(self, now: datetime) -> TaskStatistics:
        """Read grouped counts; enum names from the store become enum members."""
        stats = self._db.get_task_statistics(format_timestamp(now))
        return TaskStatistics(
            total=stats["total"],
            overdue=stats["overdue"],
            status_counts={TaskStatus(k): v for k, v in stats["status_counts"].items()},
            priority_counts={Priority(k): v for k, v in stats["priority_counts"].items()},
        )

    def list_tasks(self) -> List[Task]:
        return [Task.from_row(row) for row in self._db.list_tasks()]

    def get_task(self, task_id: int) -> Optional[Task]:
        row = self._db.get_task(task_id)
        return Task.from_row(row) if row else None

    def count_by_status(self, status: TaskStatus) -> int:
        return self._db.count_by_status(status.value)

    def count_by_priority(self, priority: Priority) -> int:
        return self._db.count_by_priority(priority.value)

    def find_by_assignee(self, assigned_to: str) -> List[Task]:
        return [Task.from_row(row) for row in self._db.get_tasks_by_assignee(assigned_to)]

    def find_by_tag(self, tag: str) -> List[Task]:
        return [Task.from_row(row) for row in self._db.get_tasks_by_tag(tag)]

    # Expose database for health checks
    @property
    def db(self) -> TaskDatabase:
        """Access underlying database."""
        return self._db
