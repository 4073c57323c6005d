"""
MCP tool definitions exposed by the stdio proxy.
"""
from taskmcp.models.task_models import TaskStatus, Priority

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 100

_TASK_ITEM_SCHEMA = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "status": {"type": "string", "enum": [s.value for s in TaskStatus]},
        "priority": {"type": "string", "enum": [p.value for p in Priority]},
        "dueDate": {"type": "string"},
        "assignedTo": {"type": "string"},
        "tags": {"type": "string"},
    },
    "required": ["title", "status", "priority"],
}


def _no_arguments():
    return {"type": "object", "properties": {}, "required": []}


MCP_TOOLS = [
    {
        "name": "get_task_schema",
        "description": "Get the database schema for tasks table",
        "inputSchema": _no_arguments(),
    },
    {
        "name": "insert_tasks",
        "description": "Insert tasks into the database. The batch is all-or-nothing: "
                       "one invalid task rejects every task in the call.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "tasks": {
                    "type": "array",
                    "description": "Array of task objects",
                    "items": _TASK_ITEM_SCHEMA,
                },
            },
            "required": ["tasks"],
        },
    },
    {
        "name": "get_tasks_summary",
        "description": "Get comprehensive task statistics",
        "inputSchema": _no_arguments(),
    },
    {
        "name": "get_all_tasks",
        "description": "Get all tasks with pagination",
        "inputSchema": {
            "type": "object",
            "properties": {
                "page": {"type": "number", "default": DEFAULT_PAGE},
                "size": {"type": "number", "default": DEFAULT_PAGE_SIZE},
            },
        },
    },
    {
        "name": "get_help",
        "description": "Get help information about the MCP server",
        "inputSchema": _no_arguments(),
    },
]

TOOL_NAMES = [tool["name"] for tool in MCP_TOOLS]
