"""Tests for timezone validation and timestamp formatting."""

from datetime import datetime, timezone

import pytest

from rbxstatus.core.timestamps import (
    DEFAULT_TIMEZONE,
    VALID_TIMEZONES,
    format_timestamp,
    validate_timezone,
)
from rbxstatus.utils.errors import ErrorCode, InvalidTimezoneError

# 2024-01-15 12:34:56.789 UTC
INSTANT = datetime(2024, 1, 15, 12, 34, 56, 789000, tzinfo=timezone.utc)


class TestValidateTimezone:
    """Tests for validate_timezone."""

    @pytest.mark.parametrize("tz", VALID_TIMEZONES)
    def test_allowed_timezones(self, tz):
        """Test every allow-listed timezone passes."""
        assert validate_timezone(tz) == tz

    def test_default_is_allowed(self):
        """Test the default timezone is in the allow-list."""
        assert DEFAULT_TIMEZONE in VALID_TIMEZONES

    @pytest.mark.parametrize("tz", ["Mars/Phobos", "Europe/Paris", "utc", ""])
    def test_rejected_timezones(self, tz):
        """Test timezones outside the allow-list are rejected."""
        with pytest.raises(InvalidTimezoneError) as exc_info:
            validate_timezone(tz)

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == ErrorCode.INVALID_TIMEZONE
        assert exc_info.value.details["validTimezones"] == list(VALID_TIMEZONES)


class TestFormatTimestamp:
    """Tests for format_timestamp."""

    def test_bangkok(self):
        """Test Bangkok is labelled TH and shifted +7h."""
        ts = format_timestamp("Asia/Bangkok", now=INSTANT)

        assert ts.timezone == "TH"
        assert ts.time == "19:34"
        assert ts.full == "2024-01-15 19:34:56"

    def test_new_york(self):
        """Test other zones keep their name as the label."""
        ts = format_timestamp("America/New_York", now=INSTANT)

        assert ts.timezone == "America/New_York"
        assert ts.time == "07:34"
        assert ts.full == "2024-01-15 07:34:56"

    def test_local_date_can_differ(self):
        """Test the local date rolls over east of UTC."""
        late = datetime(2024, 1, 15, 23, 30, tzinfo=timezone.utc)
        ts = format_timestamp("Asia/Tokyo", now=late)

        assert ts.full == "2024-01-16 08:30:00"

    def test_utc_fields_are_zone_independent(self):
        """Test iso and unix describe the same instant for any zone."""
        bangkok = format_timestamp("Asia/Bangkok", now=INSTANT)
        sydney = format_timestamp("Australia/Sydney", now=INSTANT)

        assert bangkok.iso == sydney.iso == "2024-01-15T12:34:56.789Z"
        assert bangkok.unix == sydney.unix == int(INSTANT.timestamp())

    def test_defaults_to_now(self):
        """Test the current time is used when no instant is given."""
        before = int(datetime.now(timezone.utc).timestamp())
        ts = format_timestamp("UTC")
        after = int(datetime.now(timezone.utc).timestamp())

        assert before <= ts.unix <= after
        assert ts.timezone == "UTC"
        assert ts.iso.endswith("Z")
