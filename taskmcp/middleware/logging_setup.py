"""
Logging configuration and setup.
"""
import os
import logging
from typing import Optional

from taskmcp.monitoring import get_request_id

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class RequestIDFilter(logging.Filter):
    """Logging filter to add the current request ID to log records."""

    def filter(self, record):
        if not hasattr(record, 'request_id'):
            record.request_id = get_request_id() or '-'
        return True


class SafeFormatter(logging.Formatter):
    """Formatter that handles a missing request_id gracefully."""

    def format(self, record):
        if not hasattr(record, 'request_id'):
            record.request_id = '-'
        return super().format(record)


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once for the service.

    Args:
        level: Log level name; defaults to the LOG_LEVEL environment variable
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    handler = logging.StreamHandler()
    handler.addFilter(RequestIDFilter())
    handler.setFormatter(SafeFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=[handler],
        force=True
    )
