"""Error handling utilities for consistent error responses."""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""

    # Request errors
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_TIMEZONE = "INVALID_TIMEZONE"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"

    # Upstream errors
    BAD_GATEWAY = "BAD_GATEWAY"
    GATEWAY_TIMEOUT = "GATEWAY_TIMEOUT"


class ErrorResponse(BaseModel):
    """HTTP error response model."""

    error: ErrorCode
    message: str
    details: dict[str, Any] | None = None


# User-friendly error messages by error code
USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.BAD_REQUEST: "Invalid request parameters",
    ErrorCode.INVALID_TIMEZONE: "Invalid timezone",
    ErrorCode.NOT_FOUND: "The requested endpoint does not exist",
    ErrorCode.RATE_LIMIT_EXCEEDED: "Too many requests, please try again later.",
    ErrorCode.INTERNAL_SERVER_ERROR: "An unexpected error occurred",
    ErrorCode.BAD_GATEWAY: "Failed to fetch Roblox status from official source",
    ErrorCode.GATEWAY_TIMEOUT: "Request timeout while fetching Roblox status",
}

# Default message for unknown errors
DEFAULT_USER_MESSAGE = "An unexpected error occurred"

# Maximum length for error messages
MAX_ERROR_LENGTH = 500


class StatusApiError(Exception):
    """Base error carrying an HTTP status code and a machine-readable code.

    Attributes:
        status_code: HTTP status code to respond with.
        code: Error code placed in the response ``error`` field.
        message: Human-readable message.
        details: Optional extra context for the response body.
    """

    status_code: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or get_user_message(self.code)
        self.details = details
        super().__init__(self.message)


class InvalidTimezoneError(StatusApiError):
    """Requested timezone is not in the allow-list."""

    status_code = 400
    code = ErrorCode.INVALID_TIMEZONE


class UpstreamUnreachableError(StatusApiError):
    """Upstream status source failed for a reason other than a timeout."""

    status_code = 502
    code = ErrorCode.BAD_GATEWAY


class UpstreamTimeoutError(StatusApiError):
    """Upstream status source timed out on the final attempt."""

    status_code = 504
    code = ErrorCode.GATEWAY_TIMEOUT


def get_user_message(code: ErrorCode | None, default: str | None = None) -> str:
    """Get user-appropriate error message for an error code.

    Args:
        code: The error code.
        default: Default message if code not found.

    Returns:
        User-friendly error message.
    """
    if code is None:
        return default or DEFAULT_USER_MESSAGE

    return USER_MESSAGES.get(code, default or DEFAULT_USER_MESSAGE)


def truncate_error(error: str, max_length: int = MAX_ERROR_LENGTH) -> str:
    """Truncate error message if too long.

    Args:
        error: The error message.
        max_length: Maximum allowed length.

    Returns:
        Truncated error message.
    """
    if len(error) <= max_length:
        return error

    return error[: max_length - 3] + "..."


def create_error_response(
    code: ErrorCode,
    message: str | None = None,
    details: dict[str, Any] | None = None,
) -> ErrorResponse:
    """Create a standardized error response.

    Args:
        code: The error code.
        message: Optional custom message.
        details: Optional extra context.

    Returns:
        ErrorResponse model.
    """
    text = message if message else get_user_message(code)
    return ErrorResponse(
        error=code,
        message=truncate_error(text),
        details=details,
    )


def log_error(
    exc: Exception,
    code: ErrorCode,
    request_id: str | None = None,
    **context: Any,
) -> None:
    """Log an error with context.

    Internal errors are logged with the traceback, everything else as a
    single error line.

    Args:
        exc: The exception that occurred.
        code: The classified error code.
        request_id: Optional request ID.
        **context: Additional context to include in log.
    """
    log_extra = {
        "error_code": code.value,
        "error_type": type(exc).__name__,
        "request_id": request_id,
        **context,
    }

    if code == ErrorCode.INTERNAL_SERVER_ERROR:
        logger.exception("Internal error occurred", extra=log_extra)
    else:
        logger.error(f"Request error: {exc}", extra=log_extra)
