"""Tests for envelope assembly."""

from datetime import datetime, timezone

import pytest

from rbxstatus.core.envelope import ICON, TITLE, build_envelope
from rbxstatus.core.health import determine_status, reduce_health
from rbxstatus.core.incidents import incident_message
from rbxstatus.core.timestamps import format_timestamp
from rbxstatus.models.status import Component, IncidentSummary, ResultMeta, StatusResult


@pytest.fixture
def result() -> StatusResult:
    components = [Component(name="Website", status="Operational", weight=100)]
    health = reduce_health(components)
    incidents = IncidentSummary(active=False, count=0, message=incident_message(False, 0))
    return StatusResult(
        status=determine_status(health, incidents),
        health=health,
        components=components,
        incidents=incidents,
        updated=format_timestamp("UTC", now=datetime(2024, 1, 1, tzinfo=timezone.utc)),
        meta=ResultMeta(source="https://status.roblox.com/", scrape_duration=42),
    )


class TestBuildEnvelope:
    """Tests for build_envelope."""

    def test_fresh_envelope_shape(self, result):
        """Test the exact top-level field set of an uncached envelope."""
        envelope = build_envelope(result, cached=False)

        assert list(envelope) == [
            "cached",
            "title",
            "icon",
            "status",
            "health",
            "components",
            "incidents",
            "updated",
            "meta",
        ]
        assert envelope["cached"] is False
        assert envelope["title"] == TITLE
        assert envelope["icon"] == ICON

    def test_cached_envelope_has_age(self, result):
        """Test cacheAge follows cached and only appears on hits."""
        envelope = build_envelope(result, cached=True, cache_age_seconds=12)

        assert list(envelope)[:3] == ["cached", "cacheAge", "title"]
        assert envelope["cacheAge"] == 12

    def test_result_fields_are_copied(self, result):
        """Test the nested blocks use the public JSON names."""
        envelope = build_envelope(result, cached=False)

        assert envelope["status"] == {
            "text": "All Systems Operational",
            "emoji": "🟢",
            "state": "operational",
        }
        assert envelope["health"] == {"percent": 100, "emoji": "🟢", "state": "operational"}
        assert envelope["components"] == [{"name": "Website", "status": "Operational", "weight": 100}]
        assert envelope["updated"]["iso"] == "2024-01-01T00:00:00.000Z"
        assert envelope["meta"] == {
            "official": True,
            "source": "https://status.roblox.com/",
            "scrapeDuration": 42,
        }
