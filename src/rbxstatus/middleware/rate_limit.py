"""Fixed-window per-client rate limiting."""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from rbxstatus.config import RateLimitSettings
from rbxstatus.utils.errors import ErrorCode, create_error_response

logger = logging.getLogger(__name__)

EXEMPT_PATHS = ("/health", "/health/ready")


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowLimiter:
    """Counts requests per client in fixed windows of ``window_seconds``."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def hit(self, client: str) -> tuple[bool, int, float]:
        """Record a request.

        Returns:
            (allowed, remaining, seconds until the window resets)
        """
        now = self._clock()
        window = self._windows.get(client)
        if window is None or now - window.started_at >= self.window_seconds:
            self._prune(now)
            window = _Window(started_at=now, count=0)
            self._windows[client] = window

        window.count += 1
        reset_in = self.window_seconds - (now - window.started_at)
        remaining = max(0, self.max_requests - window.count)
        return window.count <= self.max_requests, remaining, reset_in

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects clients that exceed the configured request rate with 429."""

    def __init__(self, app, settings: RateLimitSettings, limiter: FixedWindowLimiter | None = None):
        super().__init__(app)
        self.settings = settings
        self.limiter = limiter or FixedWindowLimiter(
            max_requests=settings.max_requests,
            window_seconds=settings.window_ms / 1000,
        )

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        if request.url.path in EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = self.limiter.hit(client)

        if not allowed:
            logger.warning("Rate limit exceeded", extra={"client_ip": client})
            body = create_error_response(ErrorCode.RATE_LIMIT_EXCEEDED).model_dump(
                mode="json", exclude_none=True
            )
            body["retryAfter"] = self.settings.window_ms / 1000
            return JSONResponse(
                status_code=429,
                content=body,
                headers={"Retry-After": str(math.ceil(reset_in))},
            )

        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(self.limiter.max_requests)
        response.headers["RateLimit-Remaining"] = str(remaining)
        response.headers["RateLimit-Reset"] = str(math.ceil(reset_in))
        return response
