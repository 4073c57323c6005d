"""
Schema service - JSON Schema and help documents describing the task API.
"""
from typing import Dict, Any

from taskmcp import __version__
from taskmcp.models.task_models import (
    TaskStatus,
    Priority,
    TITLE_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    ASSIGNED_TO_MAX_LENGTH,
    TAGS_MAX_LENGTH,
)

SERVICE_NAME = "MCP Task Management Server"
SERVICE_DESCRIPTION = "AI-powered data injection service for Task Management"
TIMESTAMP_PATTERN = "yyyy-MM-dd HH:mm:ss"

EXAMPLE_TASK = {
    "title": "Implement user authentication",
    "description": "Add JWT-based authentication system with login and registration",
    "status": TaskStatus.TODO.value,
    "priority": Priority.HIGH.value,
    "dueDate": "2025-01-20 17:00:00",
    "assignedTo": "jane.smith@example.com",
    "tags": "security,authentication,backend",
}


class SchemaService:
    """Builds the static documents served by the schema and help endpoints."""

    def generate_task_schema(self) -> Dict[str, Any]:
        """
        JSON Schema (draft-07) of a task as accepted by the insert endpoint.

        Enumerations and length limits are taken from the model definitions,
        so the document always matches what the service enforces.
        """
        properties = {
            "id": {
                "type": "integer",
                "description": "Unique identifier (auto-generated, omit in POST requests)",
                "readOnly": True,
            },
            "title": {
                "type": "string",
                "maxLength": TITLE_MAX_LENGTH,
                "description": "Task title (required)",
                "example": "Complete project documentation",
            },
            "description": {
                "type": "string",
                "maxLength": DESCRIPTION_MAX_LENGTH,
                "description": "Detailed task description (optional)",
                "example": "Write comprehensive documentation for the new feature",
            },
            "status": {
                "type": "string",
                "enum": [s.value for s in TaskStatus],
                "description": "Current status of the task (required)",
                "example": TaskStatus.TODO.value,
            },
            "priority": {
                "type": "string",
                "enum": [p.value for p in Priority],
                "description": "Task priority level (required)",
                "example": Priority.MEDIUM.value,
            },
            "dueDate": {
                "type": "string",
                "format": "date-time",
                "pattern": TIMESTAMP_PATTERN,
                "description": "Task due date and time (optional)",
                "example": "2025-01-15 14:30:00",
            },
            "assignedTo": {
                "type": "string",
                "maxLength": ASSIGNED_TO_MAX_LENGTH,
                "description": "Person assigned to the task (optional)",
                "example": "john.doe@example.com",
            },
            "tags": {
                "type": "string",
                "maxLength": TAGS_MAX_LENGTH,
                "description": "Comma-separated tags (optional)",
                "example": "backend,database,urgent",
            },
            "createdAt": {
                "type": "string",
                "format": "date-time",
                "description": "Creation timestamp (auto-generated)",
                "readOnly": True,
            },
            "updatedAt": {
                "type": "string",
                "format": "date-time",
                "description": "Last update timestamp (auto-generated)",
                "readOnly": True,
            },
        }

        return {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "title": "Task",
            "description": "Task Management Database Schema",
            "properties": properties,
            "required": ["title", "status", "priority"],
            "example": dict(EXAMPLE_TASK),
        }

    def get_help(self) -> Dict[str, Any]:
        """Help document listing endpoints, enumerations and a usage walkthrough."""
        return {
            "service": SERVICE_NAME,
            "version": __version__,
            "description": SERVICE_DESCRIPTION,
            "endpoints": {
                "GET /mcp/schema/tasks": "Get the database schema for tasks table as JSON-Schema",
                "POST /mcp/tasks": "Insert an array of Task objects into the database",
                "GET /mcp/tasks/summary": "Get summary statistics of all tasks",
                "GET /mcp/help": "Get this help information",
                "GET /mcp/tasks": "Get all tasks with pagination",
            },
            "taskStatuses": [s.value for s in TaskStatus],
            "taskPriorities": [p.value for p in Priority],
            "exampleUsage": {
                "step1": "GET /mcp/schema/tasks - Inspect the schema",
                "step2": "POST /mcp/tasks - Insert task data as JSON array",
                "step3": "GET /mcp/tasks/summary - Verify insertion results",
            },
            "notes": [
                f"All timestamps should be in '{TIMESTAMP_PATTERN}' format",
                "Tags should be comma-separated strings",
                "Created and updated timestamps are auto-generated",
                "ID field is auto-generated and should be omitted in POST requests",
            ],
        }
