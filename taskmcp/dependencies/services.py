"""
Service container for dependency injection.
Centralizes service initialization and provides access to all services.
"""
import os
import logging
from typing import Optional

from taskmcp.database import TaskDatabase
from taskmcp.storage import SQLiteTaskStorage
from taskmcp.services import TaskService, AnalyticsService, SchemaService

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "./data/tasks.db"

# Global service instance
_service_instance: Optional['ServiceContainer'] = None


class ServiceContainer:
    """Container for all application services."""

    def __init__(self, db_path: Optional[str] = None):
        # Initialize database
        db_path = db_path or os.getenv("TASKMCP_DB_PATH", DEFAULT_DB_PATH)
        self.db = TaskDatabase(db_path)

        # Both services share one storage object
        self.storage = SQLiteTaskStorage(self.db)
        self.task_service = TaskService(self.storage)
        self.analytics_service = AnalyticsService(self.storage)
        self.schema_service = SchemaService()
        logger.info(f"Service container initialized (database: {db_path})")


def get_services() -> ServiceContainer:
    """Get the global service container instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = ServiceContainer()
    return _service_instance


def get_db() -> TaskDatabase:
    """Get the database instance from the service container."""
    return get_services().db


def get_task_service() -> TaskService:
    return get_services().task_service


def get_analytics_service() -> AnalyticsService:
    return get_services().analytics_service


def get_schema_service() -> SchemaService:
    return get_services().schema_service
