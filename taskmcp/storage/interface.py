"""
Storage interface - the contract the services depend on.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List, Any

from taskmcp.models.task_models import Task, TaskCreate, TaskStatistics, TaskStatus, Priority


class TaskStorage(ABC):
    """Abstract interface for task persistence."""

    # Write side
    @abstractmethod
    def append_batch(self, tasks: List[TaskCreate]) -> List[Task]:
        """Persist all tasks atomically and return them with assigned IDs, in input order."""
        pass

    @abstractmethod
    def update_task(self, task_id: int, **fields: Any) -> Optional[Task]:
        """Update a task, refreshing updated_at. Returns None if it does not exist."""
        pass

    @abstractmethod
    def delete_task(self, task_id: int) -> bool:
        """Delete a task."""
        pass

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every task and return how many were removed."""
        pass

    # Read side
    @abstractmethod
    def read_statistics(self, now: datetime) -> TaskStatistics:
        """Read all grouped counts from one consistent snapshot."""
        pass

    @abstractmethod
    def list_tasks(self) -> List[Task]:
        """List all tasks ordered by ID."""
        pass

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[Task]:
        """Get a task by ID."""
        pass

    @abstractmethod
    def count_by_status(self, status: TaskStatus) -> int:
        pass

    @abstractmethod
    def count_by_priority(self, priority: Priority) -> int:
        pass

    @abstractmethod
    def find_by_assignee(self, assigned_to: str) -> List[Task]:
        pass

    @abstractmethod
    def find_by_tag(self, tag: str) -> List[Task]:
        pass
