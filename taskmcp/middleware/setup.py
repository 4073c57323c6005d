"""
Middleware setup and configuration.
"""
import os
import logging

from fastapi.middleware.cors import CORSMiddleware

from taskmcp.monitoring import MetricsMiddleware

logger = logging.getLogger(__name__)


def get_cors_origins():
    """Allowed CORS origins from TASKMCP_CORS_ORIGINS (comma-separated, default '*')."""
    raw = os.getenv("TASKMCP_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


def setup_middleware(app):
    """Set up all middleware for the FastAPI application."""
    origins = get_cors_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    logger.debug(f"CORS enabled for origins: {', '.join(origins)}")

    # Added last so it wraps CORS and sees every response
    app.add_middleware(MetricsMiddleware)
