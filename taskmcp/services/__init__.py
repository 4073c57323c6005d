"""
Service layer for business logic.
Services contain pure business logic without HTTP framework dependencies.
"""

from taskmcp.services.task_service import TaskService
from taskmcp.services.analytics_service import AnalyticsService
from taskmcp.services.schema_service import SchemaService

__all__ = ["TaskService", "AnalyticsService", "SchemaService"]
