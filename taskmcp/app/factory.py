"""
Application factory - creates and configures the FastAPI application.
This isolates all initialization logic from main.py.
"""
import logging
from contextlib import asynccontextmanager

from taskmcp import __version__
from taskmcp.adapters.http_framework import HTTPFrameworkAdapter
from taskmcp.api.routes.health import router as health_router
from taskmcp.api.routes.mcp import router as mcp_router
from taskmcp.dependencies.services import get_services
from taskmcp.exceptions.handlers import setup_exception_handlers
from taskmcp.middleware.setup import setup_middleware

logger = logging.getLogger(__name__)

http_adapter = HTTPFrameworkAdapter()

API_TITLE = "Task Manager MCP Server API"

API_DESCRIPTION = """**AI-Powered Task Management MCP Server**

This API serves as a Model Context Protocol (MCP) server that allows AI agents
to interact with a task management database.

## Key Features:
- **Schema Inspection**: AI agents can understand database structure
- **Bulk Data Operations**: Insert many tasks in one atomic batch
- **Analytics & Insights**: Get task statistics and health indicators

## Typical AI Workflow:
1. **GET /mcp/help** - Understand available operations
2. **GET /mcp/schema/tasks** - Inspect database schema
3. **POST /mcp/tasks** - Insert generated task data
4. **GET /mcp/tasks/summary** - Verify and analyze results

## Task Statuses:
- `TODO`: Task is pending
- `IN_PROGRESS`: Task is being worked on
- `DONE`: Task is completed
- `CANCELLED`: Task was cancelled
- `ON_HOLD`: Task is temporarily paused

## Priority Levels:
- `LOW`, `MEDIUM`, `HIGH`, `URGENT`
"""


@asynccontextmanager
async def lifespan(app):
    """Initialize services on startup and log shutdown."""
    logger.info("Application starting up...")
    get_services()
    logger.info("Services initialized")

    yield

    logger.info("Application shutting down...")


def create_app():
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance ready to run.
    """
    app_adapter = http_adapter.create_app(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )

    setup_middleware(app_adapter)
    setup_exception_handlers(app_adapter)

    app_adapter.include_router(mcp_router)
    app_adapter.include_router(health_router)

    return app_adapter.app
