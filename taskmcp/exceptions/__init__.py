"""
Standard exceptions for the task service.

Services raise these; the HTTP layer converts them with to_http_exception()
or into the MCP-style {"success": False, ...} shape with to_mcp_error_response().
"""
from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException


class ServiceError(Exception):
    """Base class for all service-level errors."""

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.context = dict(context) if context else {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the error, omitting empty optional parts."""
        result: Dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
        }
        if self.request_id:
            result["request_id"] = self.request_id
        if self.context:
            result["context"] = self.context
        if self.original_error is not None:
            result["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error),
            }
        return result


class ValidationError(ServiceError):
    """Input rejected before reaching the store."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        index: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
        self.index = index
        if field is not None:
            self.context["field"] = field
        if value is not None:
            self.context["value"] = str(value)
        if index is not None:
            self.context["index"] = index


def _record_prefix(index: Optional[int]) -> str:
    # index is zero-based, messages are one-based
    return f"Task #{index + 1}: " if index is not None else ""


class MissingFieldError(ValidationError):
    """A required field is absent or blank."""

    def __init__(self, field: str, index: Optional[int] = None, **kwargs: Any):
        message = f"{_record_prefix(index)}task {field} is required"
        super().__init__(message, field=field, index=index, **kwargs)


class InvalidEnumValueError(ValidationError):
    """A value outside a closed enumeration."""

    def __init__(
        self,
        field: str,
        value: Any,
        allowed: Iterable[str] = (),
        index: Optional[int] = None,
        **kwargs: Any,
    ):
        self.allowed = list(allowed)
        message = f"{_record_prefix(index)}invalid task {field} '{value}'"
        if self.allowed:
            message += f". Must be one of: {', '.join(self.allowed)}"
        super().__init__(message, field=field, value=value, index=index, **kwargs)


class InvalidFieldValueError(ValidationError):
    """A value that cannot be interpreted for its field (e.g. an unparseable due date)."""

    def __init__(self, field: str, value: Any, reason: Optional[str] = None, index: Optional[int] = None, **kwargs: Any):
        message = f"{_record_prefix(index)}invalid value for {field}: '{value}'"
        if reason:
            message += f" ({reason})"
        super().__init__(message, field=field, value=value, index=index, **kwargs)


class DatabaseError(ServiceError):
    """The store failed to carry out an operation."""

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.operation = operation
        if operation is not None:
            self.context["operation"] = operation


class StoreFailureError(DatabaseError):
    """The store rejected a batch write after validation passed; nothing was committed."""

    def __init__(self, cause: BaseException, **kwargs: Any):
        super().__init__(
            f"Failed to save tasks batch: {cause}",
            operation="INSERT",
            original_error=cause,
            **kwargs,
        )
        self.cause = cause


_HTTP_STATUS = (
    (ValidationError, 422),
    (DatabaseError, 500),
)


def to_http_exception(exc: ServiceError) -> HTTPException:
    """Convert a ServiceError into a FastAPI HTTPException."""
    status_code = 500
    for exc_class, code in _HTTP_STATUS:
        if isinstance(exc, exc_class):
            status_code = code
            break
    detail: Dict[str, Any] = {
        "error": type(exc).__name__,
        "message": exc.message,
    }
    if exc.context:
        detail["context"] = exc.context
    return HTTPException(status_code=status_code, detail=detail)


def to_mcp_error_response(exc: ServiceError) -> Dict[str, Any]:
    """Convert a ServiceError into the MCP-style error payload."""
    response: Dict[str, Any] = {
        "success": False,
        "error": exc.message,
        "error_type": type(exc).__name__,
    }
    if exc.context:
        response["error_details"] = exc.context
    if exc.request_id:
        response["request_id"] = exc.request_id
    return response


__all__ = [
    "ServiceError",
    "ValidationError",
    "MissingFieldError",
    "InvalidEnumValueError",
    "InvalidFieldValueError",
    "DatabaseError",
    "StoreFailureError",
    "to_http_exception",
    "to_mcp_error_response",
]
