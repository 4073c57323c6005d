"""
Health and metrics API routes.
"""
from taskmcp.adapters.http_framework import HTTPFrameworkAdapter
from taskmcp.dependencies.services import get_services
from taskmcp.monitoring import get_health_info, get_metrics, METRICS_CONTENT_TYPE

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Response = http_adapter.Response
JSONResponse = http_adapter.JSONResponse

router = http_adapter.create_router(tags=["health"])


@router.get("/health")
def health_check():
    """Health check endpoint with component status (database, service)."""
    services = get_services()
    health_info = get_health_info(services.db)

    if health_info.get("status") == "unhealthy":
        return JSONResponse(content=health_info, status_code=503)
    return health_info


@router.get("/metrics")
def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=METRICS_CONTENT_TYPE)
