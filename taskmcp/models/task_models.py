"""
Pydantic models and enumerations for task records.
"""
from datetime import datetime, UTC
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

# Wire and storage format for every timestamp
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000
ASSIGNED_TO_MAX_LENGTH = 100
TAGS_MAX_LENGTH = 500


class TaskStatus(str, Enum):
    """Task status enumeration. Declaration order is the tie-break order for analytics."""
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    CANCELLED = "CANCELLED"
    ON_HOLD = "ON_HOLD"

    @property
    def display_name(self) -> str:
        return _STATUS_DISPLAY_NAMES[self]


class Priority(str, Enum):
    """Task priority enumeration. Declaration order is the tie-break order for analytics."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def display_name(self) -> str:
        return _PRIORITY_DISPLAY_NAMES[self]


_STATUS_DISPLAY_NAMES = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.DONE: "Done",
    TaskStatus.CANCELLED: "Cancelled",
    TaskStatus.ON_HOLD: "On Hold",
}

_PRIORITY_DISPLAY_NAMES = {
    Priority.LOW: "Low",
    Priority.MEDIUM: "Medium",
    Priority.HIGH: "High",
    Priority.URGENT: "Urgent",
}

# Statuses that are never counted as overdue
TERMINAL_STATUSES = (TaskStatus.DONE, TaskStatus.CANCELLED)


def utc_now() -> datetime:
    """Current time as a naive UTC datetime truncated to whole seconds."""
    return datetime.now(UTC).replace(tzinfo=None, microsecond=0)


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp into a naive UTC datetime.

    Accepts 'YYYY-MM-DD HH:MM:SS', 'YYYY-MM-DD' and ISO 8601 strings
    (with optional 'Z' or offset), or datetime instances.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("Timestamp cannot be empty")
        parsed = None
        for fmt in (TIMESTAMP_FORMAT, "%Y-%m-%d"):
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
        if parsed is None:
            try:
                if text.endswith('Z'):
                    parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
                else:
                    parsed = datetime.fromisoformat(text)
            except ValueError:
                raise ValueError(
                    f"Invalid timestamp '{value}'. Expected 'YYYY-MM-DD HH:MM:SS' or ISO 8601 format"
                )
    else:
        raise ValueError(f"Invalid timestamp '{value}'. Expected a string")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime in the wire/storage format."""
    if value is None:
        return None
    return value.strftime(TIMESTAMP_FORMAT)


class TaskCreate(BaseModel):
    """A validated candidate task, ready to be persisted."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., description="Task title", min_length=1)
    description: Optional[str] = Field(None, description="Detailed task description")
    status: TaskStatus = Field(..., description="Current status of the task")
    priority: Priority = Field(..., description="Task priority level")
    due_date: Optional[datetime] = Field(None, alias="dueDate", description="Task due date and time")
    assigned_to: Optional[str] = Field(None, alias="assignedTo", description="Person assigned to the task")
    tags: Optional[str] = Field(None, description="Comma-separated tags")

    @field_validator('due_date', mode='before')
    @classmethod
    def validate_due_date(cls, v: Any) -> Optional[datetime]:
        """Normalize due dates to naive UTC."""
        if v is None:
            return None
        return parse_timestamp(v)


class Task(BaseModel):
    """A persisted task."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: Priority
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    tags: Optional[str] = None

    @field_serializer('due_date', 'created_at', 'updated_at')
    def serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return format_timestamp(value)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Task":
        """Build a Task from a database row dictionary."""
        return cls(
            id=row["id"],
            title=row["title"],
            description=row["description"],
            status=TaskStatus(row["status"]),
            priority=Priority(row["priority"]),
            due_date=parse_timestamp(row["due_date"]) if row["due_date"] else None,
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
            assigned_to=row["assigned_to"],
            tags=row["tags"],
        )

    def to_response(self) -> Dict[str, Any]:
        """Serialize with camelCase keys for API responses."""
        return self.model_dump(by_alias=True, mode="json")


class TaskStatistics(BaseModel):
    """Grouped counts read from a single snapshot of the store."""
    total: int
    overdue: int
    status_counts: Dict[TaskStatus, int]
    priority_counts: Dict[Priority, int]
