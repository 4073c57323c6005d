"""
Tests for exception handling in taskmcp.

Tests verify that standard exceptions carry their context, render the
per-record messages used in rejected batches, and convert properly to
HTTPException and MCP error responses.
"""
import sqlite3

import pytest
from fastapi import HTTPException
from taskmcp.exceptions import (
    ServiceError,
    ValidationError,
    MissingFieldError,
    InvalidEnumValueError,
    InvalidFieldValueError,
    DatabaseError,
    StoreFailureError,
    to_http_exception,
    to_mcp_error_response,
)


# ============================================================================
# Test Exception Initialization
# ============================================================================

class TestServiceErrorInitialization:
    """Test ServiceError base class initialization."""

    def test_basic_initialization(self):
        """Test basic ServiceError initialization."""
        exc = ServiceError("Test error message")
        assert exc.message == "Test error message"
        assert exc.request_id is None
        assert exc.context == {}
        assert exc.original_error is None
        assert str(exc) == "Test error message"

    def test_context_is_copied(self):
        """Test the caller's context dict is not mutated."""
        context = {"field": "title"}
        exc = ServiceError("Test error", context=context)
        exc.context["extra"] = 1
        assert context == {"field": "title"}

    def test_to_dict(self):
        """Test ServiceError.to_dict() with all optional parts."""
        original = ValueError("boom")
        exc = ServiceError("Test error", request_id="req-1", context={"a": 1}, original_error=original)
        assert exc.to_dict() == {
            "error_type": "ServiceError",
            "message": "Test error",
            "request_id": "req-1",
            "context": {"a": 1},
            "original_error": {"type": "ValueError", "message": "boom"},
        }

    def test_to_dict_omits_empty_parts(self):
        """Test to_dict() leaves out missing request id, context and cause."""
        assert ServiceError("x").to_dict() == {"error_type": "ServiceError", "message": "x"}


class TestValidationErrors:
    """Test pipeline rejection messages."""

    def test_validation_error_context(self):
        """Test field, value and index land in the context."""
        exc = ValidationError("bad", field="status", value=5, index=2)
        assert exc.context == {"field": "status", "value": "5", "index": 2}

    def test_missing_field_message_is_one_based(self):
        """Test the record position in the message starts at 1."""
        exc = MissingFieldError("title", index=0)
        assert exc.message == "Task #1: task title is required"
        assert exc.field == "title"
        assert isinstance(exc, ValidationError)

    def test_missing_field_without_index(self):
        """Test message without a record position."""
        assert MissingFieldError("priority").message == "task priority is required"

    def test_invalid_enum_message(self):
        """Test the message lists the allowed values."""
        exc = InvalidEnumValueError("status", "DOING", allowed=["TODO", "DONE"], index=1)
        assert exc.message == "Task #2: invalid task status 'DOING'. Must be one of: TODO, DONE"
        assert exc.allowed == ["TODO", "DONE"]
        assert exc.value == "DOING"

    def test_invalid_field_value_message(self):
        """Test an unparseable value with a reason."""
        exc = InvalidFieldValueError("dueDate", "tomorrow", reason="not a timestamp", index=0)
        assert exc.message == "Task #1: invalid value for dueDate: 'tomorrow' (not a timestamp)"
        assert exc.context["field"] == "dueDate"


class TestDatabaseErrors:
    """Test storage failure errors."""

    def test_database_error_operation(self):
        """Test DatabaseError records the operation."""
        exc = DatabaseError("failed", operation="SELECT")
        assert exc.operation == "SELECT"
        assert exc.context == {"operation": "SELECT"}

    def test_store_failure_wraps_cause(self):
        """Test StoreFailureError keeps the driver error."""
        cause = sqlite3.IntegrityError("CHECK constraint failed: tasks")
        exc = StoreFailureError(cause)
        assert exc.cause is cause
        assert exc.original_error is cause
        assert exc.operation == "INSERT"
        assert exc.message == "Failed to save tasks batch: CHECK constraint failed: tasks"
        assert isinstance(exc, DatabaseError)


# ============================================================================
# Test Conversions
# ============================================================================

class TestToHttpException:
    """Test conversion to FastAPI HTTPException."""

    def test_validation_error_is_422(self):
        """Test ValidationError maps to 422."""
        http_exc = to_http_exception(MissingFieldError("title", index=0))
        assert isinstance(http_exc, HTTPException)
        assert http_exc.status_code == 422
        assert http_exc.detail["error"] == "MissingFieldError"
        assert http_exc.detail["message"] == "Task #1: task title is required"
        assert http_exc.detail["context"] == {"field": "title", "index": 0}

    def test_database_error_is_500(self):
        """Test DatabaseError subclasses map to 500."""
        http_exc = to_http_exception(StoreFailureError(sqlite3.OperationalError("locked")))
        assert http_exc.status_code == 500

    def test_generic_service_error_is_500(self):
        """Test a plain ServiceError maps to 500 without context."""
        http_exc = to_http_exception(ServiceError("oops"))
        assert http_exc.status_code == 500
        assert "context" not in http_exc.detail


class TestToMcpErrorResponse:
    """Test conversion to MCP error payloads."""

    def test_basic_response(self):
        """Test the success=False payload."""
        response = to_mcp_error_response(InvalidEnumValueError("priority", "P1", index=0))
        assert response["success"] is False
        assert response["error_type"] == "InvalidEnumValueError"
        assert response["error"] == "Task #1: invalid task priority 'P1'"
        assert response["error_details"] == {"field": "priority", "value": "P1", "index": 0}
        assert "request_id" not in response

    def test_request_id_included(self):
        """Test request id is carried when set."""
        response = to_mcp_error_response(ServiceError("x", request_id="abc"))
        assert response["request_id"] == "abc"
        assert "error_details" not in response
