"""
Task service - validation and batch insertion of tasks.
This layer contains no HTTP framework dependencies.
"""
import logging
import sqlite3
from enum import Enum
from typing import Optional, Dict, Any, List, Sequence, Type

from pydantic import ValidationError as PydanticValidationError

from taskmcp.exceptions import (
    ValidationError,
    MissingFieldError,
    InvalidEnumValueError,
    InvalidFieldValueError,
    StoreFailureError,
)
from taskmcp.models.task_models import Task, TaskCreate, TaskStatus, Priority
from taskmcp.storage.interface import TaskStorage

logger = logging.getLogger(__name__)

# Optional fields accepted under their wire name or their model name
_FIELD_ALIASES = {
    "dueDate": "due_date",
    "assignedTo": "assigned_to",
}


def _require_enum(raw: Dict[str, Any], field: str, enum_class: Type[Enum], index: int) -> Enum:
    """Check presence and closed-set membership of an enumerated field."""
    value = raw.get(field)
    if value is None:
        raise MissingFieldError(field, index=index)
    if isinstance(value, enum_class):
        return value
    allowed = [member.value for member in enum_class]
    if not isinstance(value, str) or value not in allowed:
        raise InvalidEnumValueError(field, value, allowed=allowed, index=index)
    return enum_class(value)


def validate_task(raw: Any, index: int = 0) -> TaskCreate:
    """
    Validate one raw candidate record and convert it to a TaskCreate.

    Any client-supplied id is discarded. Checks run in order: title, status, priority.

    Args:
        raw: Candidate record (JSON object)
        index: Zero-based position in the batch, used in error messages

    Returns:
        Validated TaskCreate

    Raises:
        ValidationError: On the first violated rule
    """
    if not isinstance(raw, dict):
        raise ValidationError(f"Task #{index + 1}: expected a JSON object", index=index)

    candidate = {key: value for key, value in raw.items() if key != "id"}

    title = candidate.get("title")
    if title is None or (isinstance(title, str) and not title.strip()):
        raise MissingFieldError("title", index=index)
    if not isinstance(title, str):
        raise InvalidFieldValueError("title", title, reason="must be a string", index=index)

    status = _require_enum(candidate, "status", TaskStatus, index)
    priority = _require_enum(candidate, "priority", Priority, index)

    fields = {
        "title": title,
        "status": status,
        "priority": priority,
        "description": candidate.get("description"),
        "tags": candidate.get("tags"),
    }
    for wire_name, model_name in _FIELD_ALIASES.items():
        fields[model_name] = candidate.get(wire_name, candidate.get(model_name))

    try:
        return TaskCreate(**fields)
    except PydanticValidationError as e:
        error = e.errors()[0]
        loc = str(error["loc"][0]) if error.get("loc") else "task"
        model_field = _FIELD_ALIASES.get(loc, loc)
        wire_field = next((w for w, m in _FIELD_ALIASES.items() if m == model_field), model_field)
        raise InvalidFieldValueError(
            wire_field,
            fields.get(model_field),
            reason=error.get("msg"),
            index=index,
            original_error=e,
        )


class TaskService:
    """Service for task business logic."""

    def __init__(self, storage: TaskStorage):
        """Initialize task service with storage dependency."""
        self.storage = storage

    def save_batch(self, tasks: Sequence[Any]) -> List[Task]:
        """
        Validate and insert a batch of tasks, all or nothing.

        Args:
            tasks: Raw candidate records, in order

        Returns:
            Persisted tasks in input order, each with an assigned ID

        Raises:
            ValidationError: If any record is invalid; nothing is persisted
            StoreFailureError: If the store rejects the write; nothing is persisted
        """
        logger.info(f"Saving batch of {len(tasks)} tasks")

        # Validate the whole batch before touching the store
        drafts = [validate_task(raw, index) for index, raw in enumerate(tasks)]

        try:
            saved = self.storage.append_batch(drafts)
        except sqlite3.Error as e:
            logger.error(f"Error saving batch tasks: {e}", exc_info=True)
            raise StoreFailureError(e)

        logger.info(f"Successfully saved {len(saved)} tasks")
        return saved

    def save(self, task: Any) -> Task:
        """Insert a single task (a one-element batch)."""
        return self.save_batch([task])[0]

    def get_all_tasks(self) -> List[Task]:
        """Get all tasks ordered by ID."""
        logger.debug("Retrieving all tasks")
        return self.storage.list_tasks()

    def get_tasks_page(self, page: int, size: int) -> Dict[str, Any]:
        """
        Slice the full task list into one page.

        Args:
            page: Zero-based page number
            size: Page size (positive)

        Returns:
            Dictionary with tasks, totalCount, page, size and hasMore
        """
        if page < 0:
            raise ValueError("page must be >= 0")
        if size < 1:
            raise ValueError("size must be >= 1")

        tasks = self.get_all_tasks()
        total = len(tasks)
        start = min(page * size, total)
        end = min(start + size, total)
        return {
            "tasks": tasks[start:end],
            "totalCount": total,
            "page": page,
            "size": size,
            "hasMore": end < total,
        }

    def get_task(self, task_id: int) -> Optional[Task]:
        """Get a task by ID."""
        logger.debug(f"Retrieving task with ID: {task_id}")
        return self.storage.get_task(task_id)

    def delete_task(self, task_id: int) -> bool:
        """Delete a task by ID."""
        logger.debug(f"Deleting task with ID: {task_id}")
        return self.storage.delete_task(task_id)

    def delete_all_tasks(self) -> int:
        """Delete all tasks (cleanup)."""
        logger.warning("Deleting all tasks")
        return self.storage.delete_all()

    def count_by_status(self, status: TaskStatus) -> int:
        return self.storage.count_by_status(status)

    def count_by_priority(self, priority: Priority) -> int:
        return self.storage.count_by_priority(priority)

    def get_tasks_by_assignee(self, assigned_to: str) -> List[Task]:
        """Get tasks assigned to a person (case-insensitive)."""
        logger.debug(f"Retrieving tasks assigned to: {assigned_to}")
        return self.storage.find_by_assignee(assigned_to)

    def get_tasks_by_tag(self, tag: str) -> List[Task]:
        """Get tasks whose tags contain the given text."""
        logger.debug(f"Retrieving tasks with tag: {tag}")
        return self.storage.find_by_tag(tag)
