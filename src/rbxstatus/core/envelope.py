"""Response envelope assembly."""

from typing import Any

from rbxstatus.models.status import StatusResult

TITLE = "Roblox System Status"
ICON = "📡"


def build_envelope(
    result: StatusResult,
    cached: bool,
    cache_age_seconds: int | None = None,
) -> dict[str, Any]:
    """Wrap a result with cache metadata, title and icon.

    ``cacheAge`` is only present on cached responses.
    """
    envelope: dict[str, Any] = {"cached": cached}
    if cached:
        envelope["cacheAge"] = cache_age_seconds or 0
    envelope["title"] = TITLE
    envelope["icon"] = ICON
    envelope.update(result.model_dump(mode="json", by_alias=True, exclude_none=True))
    return envelope
