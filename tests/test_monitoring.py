"""
Tests for monitoring helpers and logging setup.
"""
import logging
import os
import shutil
import sqlite3
import tempfile
from unittest.mock import Mock

import pytest

from taskmcp.database import TaskDatabase
from taskmcp.middleware.logging_setup import RequestIDFilter, SafeFormatter, LOG_FORMAT
from taskmcp.monitoring import (
    MetricsMiddleware,
    check_database_health,
    get_health_info,
    get_metrics,
    get_request_id,
    record_batch_inserted,
    record_batch_rejected,
    request_id_var,
    set_request_id,
    _format_uptime,
)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    temp_dir = tempfile.mkdtemp()
    yield TaskDatabase(os.path.join(temp_dir, "test.db"))
    shutil.rmtree(temp_dir)


@pytest.fixture
def broken_db():
    """A database whose connections cannot be opened."""
    db = Mock()
    db._get_connection.side_effect = sqlite3.OperationalError("unable to open database file")
    return db


class TestDatabaseHealth:
    """Test database health checks."""

    def test_healthy(self, temp_db):
        health = check_database_health(temp_db)
        assert health["status"] == "healthy"
        assert health["type"] == "sqlite"

    def test_unhealthy(self, broken_db):
        health = check_database_health(broken_db)
        assert health["status"] == "unhealthy"
        assert health["error_type"] == "OperationalError"

    def test_health_info_reflects_database(self, temp_db, broken_db):
        assert get_health_info(temp_db)["status"] == "healthy"
        info = get_health_info(broken_db)
        assert info["status"] == "unhealthy"
        assert info["components"]["database"]["connectivity"] == "disconnected"

    def test_health_info_without_database(self):
        info = get_health_info()
        assert info["status"] == "healthy"
        assert "database" not in info["components"]


class TestMetrics:
    """Test Prometheus helpers."""

    def test_task_counters_exported(self):
        record_batch_inserted(2)
        record_batch_rejected("validation")
        text = get_metrics()
        assert "tasks_inserted_total" in text
        assert 'task_batches_rejected_total{reason="validation"}' in text

    @pytest.mark.parametrize("path,expected", [
        ("/mcp/tasks", "/mcp/tasks"),
        ("/mcp/tasks/42", "/mcp/tasks/{id}"),
        ("/x/123e4567-e89b-12d3-a456-426614174000", "/x/{id}"),
    ])
    def test_endpoint_normalization(self, path, expected):
        assert MetricsMiddleware._get_endpoint_path(path) == expected


class TestRequestId:
    """Test request id context and logging integration."""

    def test_set_and_get(self):
        token = request_id_var.set('')
        try:
            set_request_id("abc123")
            assert get_request_id() == "abc123"
        finally:
            request_id_var.reset(token)

    def test_log_record_gets_request_id(self):
        token = request_id_var.set("req-9")
        try:
            record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
            RequestIDFilter().filter(record)
            assert record.request_id == "req-9"
        finally:
            request_id_var.reset(token)

    def test_formatter_without_request_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        assert "[-] - hello" in SafeFormatter(LOG_FORMAT).format(record)


@pytest.mark.parametrize("seconds,expected", [
    (5, "5s"),
    (65, "1m 5s"),
    (3725, "1h 2m 5s"),
    (90061, "1d 1h 1m 1s"),
])
def test_format_uptime(seconds, expected):
    assert _format_uptime(seconds) == expected
