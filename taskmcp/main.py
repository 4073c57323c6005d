"""
Task Manager MCP service - entry point.

Run with `taskmcp-server`, `python -m taskmcp.main`, or
`uvicorn taskmcp.main:app`.
"""
import os

import uvicorn

from taskmcp.app import create_app
from taskmcp.middleware.logging_setup import setup_logging

setup_logging()

app = create_app()


def run():
    """Start the uvicorn server using TASKMCP_HOST / TASKMCP_PORT."""
    host = os.getenv("TASKMCP_HOST", "0.0.0.0")
    port = int(os.getenv("TASKMCP_PORT", "8080"))
    uvicorn.run(app, host=host, port=port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    run()
