"""
Exception handlers for the application.
"""
import sqlite3
import logging

from taskmcp.adapters.http_framework import HTTPFrameworkAdapter
from taskmcp.exceptions import ServiceError, to_http_exception, to_mcp_error_response
from taskmcp.monitoring import get_request_id

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request
JSONResponse = http_adapter.JSONResponse
RequestValidationError = http_adapter.RequestValidationError

logger = logging.getLogger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled exceptions.
    """
    request_id = get_request_id() or '-'
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {str(exc)}",
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": "An unexpected error occurred. Please try again or contact support if the issue persists.",
            "path": request.url.path,
            "method": request.method,
            "request_id": request_id
        }
    )


async def sqlite_exception_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    """
    Handler for SQLite database errors.
    """
    request_id = get_request_id() or '-'
    logger.error(
        f"Database error in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Database error",
            "detail": "A database operation failed. Please try again or contact support if the issue persists.",
            "path": request.url.path,
            "method": request.method,
            "request_id": request_id
        }
    )


async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """
    Handler for service errors that escape a route.
    MCP endpoints get the {"success": false, ...} shape, others the HTTPException detail.
    """
    if not exc.request_id:
        exc.request_id = get_request_id() or None
    http_exc = to_http_exception(exc)
    logger.warning(f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}")

    if request.url.path.startswith("/mcp/"):
        content = to_mcp_error_response(exc)
    else:
        content = {"detail": http_exc.detail}
    return JSONResponse(status_code=http_exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle request validation errors with clear messages.
    """
    request_id = get_request_id() or '-'
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")

    logger.warning(f"Validation error in {request.method} {request.url.path}: {', '.join(errors)}")
    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "detail": "One or more fields failed validation",
            "errors": errors,
            "path": request.url.path,
            "method": request.method,
            "request_id": request_id
        }
    )


def setup_exception_handlers(app):
    """
    Register exception handlers with the FastAPI app.
    """
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(sqlite3.Error, sqlite_exception_handler)
    app.add_exception_handler(ServiceError, service_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
