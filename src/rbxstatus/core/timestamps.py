"""Timezone-aware timestamp formatting."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from rbxstatus.models.status import Timestamp
from rbxstatus.utils.errors import InvalidTimezoneError

DEFAULT_TIMEZONE = "Asia/Bangkok"

VALID_TIMEZONES: tuple[str, ...] = (
    "Asia/Bangkok",
    "America/New_York",
    "America/Los_Angeles",
    "Europe/London",
    "Asia/Tokyo",
    "Australia/Sydney",
    "UTC",
)

# Timezones shown with a short label instead of their IANA name
TIMEZONE_LABELS: dict[str, str] = {"Asia/Bangkok": "TH"}


def validate_timezone(tz: str) -> str:
    """Return ``tz`` if it is allowed.

    Raises:
        InvalidTimezoneError: If ``tz`` is not in VALID_TIMEZONES.
    """
    if tz not in VALID_TIMEZONES:
        raise InvalidTimezoneError(
            f"Invalid timezone. Valid options: {', '.join(VALID_TIMEZONES)}",
            details={"validTimezones": list(VALID_TIMEZONES)},
        )
    return tz


def format_timestamp(tz: str, now: datetime | None = None) -> Timestamp:
    """Render one instant in several representations.

    Args:
        tz: IANA timezone name, already validated.
        now: The instant to render; defaults to the current time.

    Returns:
        Timestamp with local fields in ``tz`` and UTC ``iso``/``unix``.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    now_utc = now.astimezone(timezone.utc)
    local = now_utc.astimezone(ZoneInfo(tz))

    return Timestamp(
        time=local.strftime("%H:%M"),
        timezone=TIMEZONE_LABELS.get(tz, tz),
        full=local.strftime("%Y-%m-%d %H:%M:%S"),
        iso=now_utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now_utc.microsecond // 1000:03d}Z",
        unix=int(now_utc.timestamp()),
    )
