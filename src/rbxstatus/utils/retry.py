"""Retry utilities with linear backoff for handling transient upstream failures."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

import httpx

logger = logging.getLogger(__name__)

# Type variables for generic retry helper
P = ParamSpec("P")
T = TypeVar("T")

# Default retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0  # seconds

# Retryable HTTP status codes
RETRYABLE_STATUS_CODES = {
    408,  # Request Timeout
    429,  # Rate Limited
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
}


class RetryError(Exception):
    """Error raised after all retry attempts are exhausted.

    Attributes:
        original_error: The last error that occurred.
        attempts: Total number of attempts made.
    """

    def __init__(self, original_error: Exception, attempts: int):
        self.original_error = original_error
        self.attempts = attempts
        super().__init__(
            f"All {attempts} attempts exhausted. "
            f"Last error: {type(original_error).__name__}: {original_error}"
        )


def is_timeout_error(error: Exception) -> bool:
    """Check whether an error represents a timeout."""
    return isinstance(error, (httpx.TimeoutException, TimeoutError))


def is_retryable_error(error: Exception) -> bool:
    """Determine if an error is retryable.

    Args:
        error: The exception to check.

    Returns:
        True if the error is retryable, False otherwise.
    """
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES

    if is_timeout_error(error):
        return True

    # Network-level failures (DNS, refused, reset, protocol errors)
    if isinstance(error, (httpx.TransportError, ConnectionError)):
        return True

    return False


def calculate_retry_delay(retry_number: int, base_delay: float = DEFAULT_BASE_DELAY) -> float:
    """Calculate the linear delay before a retry.

    Args:
        retry_number: The retry about to be made (1 for the first retry).
        base_delay: Base delay in seconds.

    Returns:
        Delay in seconds before this retry.
    """
    return retry_number * base_delay


async def retry_with_backoff(
    func: Callable[P, Awaitable[T]],
    *args: P.args,
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    **kwargs: P.kwargs,
) -> T:
    """Execute an async function, retrying transient failures with a linear delay.

    The function runs once and is retried up to ``max_retries`` more times,
    so at most ``max_retries + 1`` attempts are made.

    Args:
        func: The async function to execute.
        *args: Positional arguments to pass to the function.
        max_retries: Maximum number of retries after the first attempt.
        base_delay: Delay unit in seconds; retry n waits n * base_delay.
        **kwargs: Keyword arguments to pass to the function.

    Returns:
        The result of the function call.

    Raises:
        RetryError: If all attempts are exhausted.
        Exception: If a non-retryable error occurs.
    """
    total_attempts = max_retries + 1
    last_error: Exception | None = None

    for attempt in range(1, total_attempts + 1):
        try:
            return await func(*args, **kwargs)
        except asyncio.CancelledError:
            # Don't retry on cancellation
            raise
        except Exception as e:
            last_error = e

            if not is_retryable_error(e):
                logger.warning(
                    f"Non-retryable error on attempt {attempt}/{total_attempts}: "
                    f"{type(e).__name__}: {e}"
                )
                raise

            if attempt < total_attempts:
                delay = calculate_retry_delay(attempt, base_delay)
                logger.warning(
                    f"Retryable error on attempt {attempt}/{total_attempts}: "
                    f"{type(e).__name__}: {e}. Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)
            else:
                logger.error(
                    f"Final attempt {attempt}/{total_attempts} failed: "
                    f"{type(e).__name__}: {e}"
                )

    assert last_error is not None
    raise RetryError(last_error, total_attempts)
