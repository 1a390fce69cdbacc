"""Utility functions for retry logic and error handling."""

from rbxstatus.utils.errors import (
    ErrorCode,
    InvalidTimezoneError,
    StatusApiError,
    UpstreamTimeoutError,
    UpstreamUnreachableError,
)
from rbxstatus.utils.retry import (
    RetryError,
    calculate_retry_delay,
    is_retryable_error,
    is_timeout_error,
    retry_with_backoff,
)

__all__ = [
    "ErrorCode",
    "InvalidTimezoneError",
    "RetryError",
    "StatusApiError",
    "UpstreamTimeoutError",
    "UpstreamUnreachableError",
    "calculate_retry_delay",
    "is_retryable_error",
    "is_timeout_error",
    "retry_with_backoff",
]
