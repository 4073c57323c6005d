"""
MCP data-injection API routes.
Thin HTTP layer that delegates to the task, analytics and schema services.
"""
import logging
from typing import List, Dict, Any

from taskmcp.adapters.http_framework import HTTPFrameworkAdapter
from taskmcp.dependencies.services import (
    get_task_service,
    get_analytics_service,
    get_schema_service,
)
from taskmcp.exceptions import ValidationError, StoreFailureError
from taskmcp.monitoring import record_batch_inserted, record_batch_rejected
from taskmcp.services import TaskService, AnalyticsService, SchemaService

logger = logging.getLogger(__name__)

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Body = http_adapter.Body
Query = http_adapter.Query
Depends = http_adapter.Depends
JSONResponse = http_adapter.JSONResponse

router = http_adapter.create_router(prefix="/mcp", tags=["mcp"])

DEFAULT_PAGE_SIZE = 100


@router.get("/schema/tasks", summary="Get task JSON Schema")
def get_task_schema(schema_service: SchemaService = Depends(get_schema_service)):
    """Return the JSON Schema (draft-07) describing the task record accepted by POST /mcp/tasks."""
    logger.info("Task schema requested")
    return schema_service.generate_task_schema()


@router.post("/tasks", summary="Insert a batch of tasks")
def insert_tasks(
    tasks: List[Dict[str, Any]] = Body(..., description="Array of task objects to insert"),
    task_service: TaskService = Depends(get_task_service),
):
    """
    Validate and insert a batch of tasks, all or nothing.

    Returns 200 with the inserted count and ID range, or 400 with
    success=false when any record is invalid or the store rejects the batch.
    """
    try:
        saved = task_service.save_batch(tasks)
    except ValidationError as e:
        logger.warning(f"Rejected batch of {len(tasks)} tasks: {e.message}")
        record_batch_rejected("validation")
        return _insert_failure(e.message)
    except StoreFailureError as e:
        record_batch_rejected("store")
        return _insert_failure(e.message)

    record_batch_inserted(len(saved))
    response: Dict[str, Any] = {
        "success": True,
        "message": "Tasks inserted successfully",
        "insertedCount": len(saved),
    }
    if saved:
        response["firstTaskId"] = saved[0].id
        response["lastTaskId"] = saved[-1].id
    return response


def _insert_failure(reason: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": f"Error inserting tasks: {reason}",
            "insertedCount": 0,
        },
    )


@router.get("/tasks/summary", summary="Get task summary statistics")
def get_tasks_summary(analytics_service: AnalyticsService = Depends(get_analytics_service)):
    """Totals, distributions, percentages and insights from one snapshot of the store."""
    return analytics_service.generate_summary()


@router.get("/tasks", summary="List tasks with pagination")
def get_all_tasks(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Page size"),
    task_service: TaskService = Depends(get_task_service),
):
    """Return one page of tasks ordered by ID."""
    result = task_service.get_tasks_page(page, size)
    result["tasks"] = [task.to_response() for task in result["tasks"]]
    return result


@router.get("/help", summary="Get API help")
def get_help(schema_service: SchemaService = Depends(get_schema_service)):
    """Endpoints, enumerations and a usage walkthrough for AI agents."""
    return schema_service.get_help()
