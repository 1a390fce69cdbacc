"""Roblox status endpoint handler."""

import logging
from typing import Any

from fastapi import APIRouter, Query

from rbxstatus.api.deps import RequestIdDep, StatusServiceDep
from rbxstatus.core.timestamps import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/status")
async def get_status(
    service: StatusServiceDep,
    request_id: RequestIdDep,
    tz: str = Query(default=DEFAULT_TIMEZONE, description="IANA timezone for the updated block"),
    refresh: bool = Query(default=False, description="Bypass the cache and fetch upstream"),
) -> dict[str, Any]:
    """Get the current Roblox system status.

    - HTTP 200: Status envelope (possibly served from cache)
    - HTTP 400: Timezone is not supported
    - HTTP 502: Upstream status source failed
    - HTTP 504: Upstream status source timed out
    """
    if refresh:
        logger.info(
            "Forced status refresh requested",
            extra={"request_id": request_id, "timezone": tz},
        )
    return await service.get_status(tz=tz, force_refresh=refresh)
