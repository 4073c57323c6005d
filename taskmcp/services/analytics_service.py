"""
Analytics service - grouped counts, percentages and insights over stored tasks.
This layer contains no HTTP framework dependencies.
"""
import logging
import math
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Callable, Mapping, Optional, Type

from taskmcp.models.task_models import TaskStatus, Priority, TaskStatistics, utc_now
from taskmcp.storage.interface import TaskStorage

logger = logging.getLogger(__name__)

NO_TASKS_MESSAGE = "No tasks in the database"

LOW_COMPLETION_THRESHOLD = 30.0
HIGH_OVERDUE_THRESHOLD = 20.0
IN_PROGRESS_SHARE_THRESHOLD = 0.5


def _percentage(count: int, total: int) -> float:
    """Percentage to two decimals, halves rounded up."""
    return math.floor(count * 100.0 / total * 100 + 0.5) / 100


def _rate_string(count: int, total: int) -> str:
    return f"{_percentage(count, total)}%"


def _distribution(counts: Mapping[Enum, int], enum_class: Type[Enum]) -> Dict[str, int]:
    """Observed values only, keyed by name in declaration order."""
    return {
        member.value: counts[member]
        for member in enum_class
        if counts.get(member, 0) > 0
    }


def _percentages(distribution: Dict[str, int], total: int) -> Dict[str, float]:
    if total == 0:
        return {}
    return {key: _percentage(count, total) for key, count in distribution.items()}


def _most_common(distribution: Dict[str, int]) -> str:
    """Key with the highest count; the first declared value wins a tie."""
    best_key: Optional[str] = None
    best_count = 0
    for key, count in distribution.items():
        if best_key is None or count > best_count:
            best_key, best_count = key, count
    return best_key if best_key is not None else "N/A"


class AnalyticsService:
    """Service for read-only task analytics."""

    def __init__(self, storage: TaskStorage, clock: Callable[[], datetime] = utc_now):
        """
        Initialize analytics service.

        Args:
            storage: Task storage to read from
            clock: Source of the overdue reference time (naive UTC)
        """
        self.storage = storage
        self.clock = clock

    def _snapshot(self) -> TaskStatistics:
        return self.storage.read_statistics(self.clock())

    def get_total_task_count(self) -> int:
        return self._snapshot().total

    def get_overdue_tasks_count(self) -> int:
        return self._snapshot().overdue

    def get_status_distribution(self) -> Dict[str, int]:
        return _distribution(self._snapshot().status_counts, TaskStatus)

    def get_priority_distribution(self) -> Dict[str, int]:
        return _distribution(self._snapshot().priority_counts, Priority)

    def get_status_percentages(self) -> Dict[str, float]:
        stats = self._snapshot()
        return _percentages(_distribution(stats.status_counts, TaskStatus), stats.total)

    def get_priority_percentages(self) -> Dict[str, float]:
        stats = self._snapshot()
        return _percentages(_distribution(stats.priority_counts, Priority), stats.total)

    def generate_task_insights(self) -> Dict[str, Any]:
        return self._insights(self._snapshot())

    def _insights(self, stats: TaskStatistics) -> Dict[str, Any]:
        """
        Qualitative insights for one snapshot.

        Returns only a "no data" message for an empty store. Otherwise reports
        completion and overdue rates, the most common status and priority, and
        health flags.
        """
        total = stats.total
        if total == 0:
            return {"message": NO_TASKS_MESSAGE}

        done = stats.status_counts.get(TaskStatus.DONE, 0)
        in_progress = stats.status_counts.get(TaskStatus.IN_PROGRESS, 0)
        completion = _percentage(done, total)
        overdue = _percentage(stats.overdue, total)

        return {
            "completionRate": _rate_string(done, total),
            "overdueRate": _rate_string(stats.overdue, total),
            "mostCommonStatus": _most_common(_distribution(stats.status_counts, TaskStatus)),
            "mostCommonPriority": _most_common(_distribution(stats.priority_counts, Priority)),
            "healthIndicators": {
                "lowCompletionRate": completion < LOW_COMPLETION_THRESHOLD,
                "highOverdueRate": overdue > HIGH_OVERDUE_THRESHOLD,
                "tooManyInProgress": in_progress > total * IN_PROGRESS_SHARE_THRESHOLD,
            },
        }

    def generate_summary(self) -> Dict[str, Any]:
        """
        Build the full summary from a single snapshot of the store.

        Returns:
            Dictionary with totalTasks, overdueTasks, statusDistribution,
            priorityDistribution, statusPercentages, priorityPercentages, insights
        """
        stats = self._snapshot()
        status_distribution = _distribution(stats.status_counts, TaskStatus)
        priority_distribution = _distribution(stats.priority_counts, Priority)

        logger.debug(f"Generating summary for {stats.total} tasks ({stats.overdue} overdue)")

        return {
            "totalTasks": stats.total,
            "overdueTasks": stats.overdue,
            "statusDistribution": status_distribution,
            "priorityDistribution": priority_distribution,
            "statusPercentages": _percentages(status_distribution, stats.total),
            "priorityPercentages": _percentages(priority_distribution, stats.total),
            "insights": self._insights(stats),
        }
