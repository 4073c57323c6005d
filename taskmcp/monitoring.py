"""
Monitoring and observability utilities for the task service.

Provides:
- Prometheus metrics (requests, latencies, errors, inserted tasks)
- Request tracing (unique request IDs)
- Database health checks
"""
import re
import time
import uuid
import logging
from typing import Callable, Dict, Any
from contextvars import ContextVar

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST

# Request context variable for tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

# Prometheus metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

tasks_inserted_total = Counter(
    'tasks_inserted_total',
    'Total number of tasks persisted through batch inserts'
)

task_batches_rejected_total = Counter(
    'task_batches_rejected_total',
    'Total number of rejected task batches',
    ['reason']
)

service_uptime_seconds = Gauge(
    'service_uptime_seconds',
    'Service uptime in seconds'
)

service_start_time = time.time()

METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST

_UUID_RE = re.compile(r'[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', re.IGNORECASE)
_NUMERIC_ID_RE = re.compile(r'/\d+')

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get('')


def set_request_id(request_id: str) -> None:
    """Set the request ID in context."""
    request_id_var.set(request_id)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for collecting Prometheus metrics and request tracing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        set_request_id(request_id)

        endpoint = self._get_endpoint_path(request.url.path)
        start_time = time.time()
        service_uptime_seconds.set(time.time() - service_start_time)

        logger.debug(f"Request started: {request.method} {request.url.path}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Request failed with exception after {duration:.3f}s: {type(e).__name__}: {e}",
                exc_info=True,
            )
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_type="exception"
            ).inc()
            raise

        status_code = response.status_code
        duration = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} -> {status_code} ({duration:.3f}s)")

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).observe(duration)

        # Track errors (4xx and 5xx)
        if status_code >= 400:
            error_type = "client_error" if status_code < 500 else "server_error"
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                error_type=error_type
            ).inc()

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _get_endpoint_path(path: str) -> str:
        """Normalize endpoint path for metrics (remove IDs, etc.)."""
        path = _UUID_RE.sub('{id}', path)
        path = _NUMERIC_ID_RE.sub('/{id}', path)
        return path[:100]


def record_batch_inserted(count: int) -> None:
    tasks_inserted_total.inc(count)


def record_batch_rejected(reason: str) -> None:
    task_batches_rejected_total.labels(reason=reason).inc()


def get_metrics() -> str:
    """Get Prometheus metrics in text format."""
    return generate_latest().decode('utf-8')


def check_database_health(db) -> Dict[str, Any]:
    """
    Check database connectivity and health.

    Args:
        db: Database instance (TaskDatabase)

    Returns:
        Dictionary with database health status
    """
    start_time = time.time()

    try:
        conn = db._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT 1")
            cursor.fetchone()
        finally:
            conn.close()

        return {
            "status": "healthy",
            "connectivity": "connected",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
            "type": getattr(db, 'db_type', 'unknown')
        }
    except Exception as e:
        response_time_ms = round((time.time() - start_time) * 1000, 2)
        logger.warning(f"Database health check failed: {type(e).__name__}: {e}")
        return {
            "status": "unhealthy",
            "connectivity": "disconnected",
            "response_time_ms": response_time_ms,
            "error": str(e),
            "error_type": type(e).__name__
        }


def get_health_info(db=None) -> Dict[str, Any]:
    """
    Get health information including uptime and component status.

    Args:
        db: Optional database instance for database health checks

    Returns:
        Dictionary with health information including component statuses
    """
    uptime = time.time() - service_start_time
    components: Dict[str, Any] = {
        "service": {
            "status": "healthy",
            "uptime_seconds": uptime,
            "uptime_formatted": _format_uptime(uptime)
        }
    }
    overall_status = "healthy"

    if db is not None:
        db_health = check_database_health(db)
        components["database"] = db_health
        if db_health.get("status") == "unhealthy":
            overall_status = "unhealthy"

    return {
        "status": overall_status,
        "service": "task-manager-mcp",
        "timestamp": time.time(),
        "uptime_seconds": uptime,
        "uptime_formatted": _format_uptime(uptime),
        "components": components
    }


def _format_uptime(seconds: float) -> str:
    """Format uptime in human-readable format."""
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    elif hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    elif minutes > 0:
        return f"{minutes}m {secs}s"
    else:
        return f"{secs}s"
