"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rbxstatus import __version__
from rbxstatus.api.routes import api_router
from rbxstatus.config import Settings, get_settings
from rbxstatus.core.cache import select_cache_backend
from rbxstatus.core.service import StatusService
from rbxstatus.middleware.logging import LoggingMiddleware, configure_logging
from rbxstatus.middleware.rate_limit import RateLimitMiddleware
from rbxstatus.middleware.request_id import RequestIdMiddleware
from rbxstatus.utils.errors import ErrorCode, StatusApiError, create_error_response, log_error

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown events."""
    settings: Settings = app.state.settings
    service: StatusService = app.state.status_service

    configure_logging(
        level=settings.logging.level,
        format=settings.logging.format,
    )

    logger.info(
        "Starting rbxstatus",
        extra={
            "version": __version__,
            "host": settings.server.host,
            "port": settings.server.port,
            "environment": settings.environment,
        },
    )

    try:
        settings.validate_required()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    if settings.cache.redis_enabled:
        service.cache.backend = await select_cache_backend(settings.cache)

    app.state.started_at = time.monotonic()
    logger.info(
        "rbxstatus started successfully",
        extra={"backend": service.cache.backend_name},
    )

    yield

    logger.info("Shutting down rbxstatus")
    await service.cache.close()


def create_app(
    settings: Settings | None = None,
    status_service: StatusService | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing.
        status_service: Optional pipeline override for testing.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="rbxstatus",
        description="Normalized Roblox system status with short-lived caching",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.status_service = status_service or StatusService.from_settings(settings)
    app.state.started_at = time.monotonic()

    # Last added runs first: CORS -> request ID -> logging -> rate limit
    if settings.rate_limit.enabled:
        app.add_middleware(RateLimitMiddleware, settings=settings.rate_limit)

    app.add_middleware(LoggingMiddleware)

    app.add_middleware(RequestIdMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors.allowed_origins,
        allow_credentials=settings.server.cors.allow_credentials,
        allow_methods=settings.server.cors.allowed_methods,
        allow_headers=settings.server.cors.allowed_headers,
    )

    app.add_exception_handler(StatusApiError, status_api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    app.include_router(api_router)

    return app


async def status_api_error_handler(request: Request, exc: StatusApiError) -> JSONResponse:
    """Handle pipeline errors (invalid timezone, upstream failures)."""
    log_error(
        exc,
        exc.code,
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
    )
    body = create_error_response(exc.code, exc.message, exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle query parameter validation errors."""
    body = create_error_response(
        ErrorCode.BAD_REQUEST,
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(status_code=400, content=body.model_dump(mode="json", exclude_none=True))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle routing errors such as unknown paths."""
    if exc.status_code == 404:
        body = create_error_response(ErrorCode.NOT_FOUND).model_dump(mode="json", exclude_none=True)
        body["path"] = request.url.path
        return JSONResponse(status_code=404, content=body)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": f"HTTP_{exc.status_code}", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors."""
    request_id = getattr(request.state, "request_id", None)

    log_error(
        exc,
        ErrorCode.INTERNAL_SERVER_ERROR,
        request_id=request_id,
        path=request.url.path,
        method=request.method,
    )

    body = create_error_response(
        ErrorCode.INTERNAL_SERVER_ERROR,
        details={"request_id": request_id} if request_id else None,
    )
    return JSONResponse(status_code=500, content=body.model_dump(mode="json", exclude_none=True))


def run() -> None:
    """Run the server with uvicorn using configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "rbxstatus.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
    )


# Create the default app instance
app = create_app()
