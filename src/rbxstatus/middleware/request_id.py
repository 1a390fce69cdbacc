"""Request ID middleware for request tracing."""

import re
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from rbxstatus.middleware.logging import request_id_var

REQUEST_ID_HEADER = "X-Request-ID"

# Accept caller ids that are safe to echo into headers and log lines
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def is_valid_request_id(value: str) -> bool:
    """Check if a caller-supplied request ID can be reused."""
    return bool(_REQUEST_ID_PATTERN.match(value))


def generate_request_id() -> str:
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request ID to every request and response.

    A valid incoming X-Request-ID is reused, otherwise a new one is
    generated. The ID is stored on ``request.state`` and in the logging
    context for the duration of the request.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER, "")
        if not is_valid_request_id(request_id):
            request_id = generate_request_id()

        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
