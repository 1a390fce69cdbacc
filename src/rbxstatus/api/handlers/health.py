"""Health check endpoint handlers."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from rbxstatus import __version__
from rbxstatus.api.deps import SettingsDep, StatusServiceDep
from rbxstatus.models.health import HealthResponse, HealthStatus, ReadinessResponse

router = APIRouter()


def get_uptime_seconds(request: Request) -> int:
    started_at = getattr(request.app.state, "started_at", None)
    if started_at is None:
        return 0
    return int(time.monotonic() - started_at)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    request: Request, settings: SettingsDep, service: StatusServiceDep
) -> HealthResponse:
    """Liveness probe.

    Does not touch the upstream source; always healthy while the process
    is serving requests.
    """
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        uptime=get_uptime_seconds(request),
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        cache=service.cache.backend_name,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Readiness probe."""
    return ReadinessResponse(ready=True)
