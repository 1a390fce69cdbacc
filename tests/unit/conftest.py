"""Shared fixtures for unit tests."""

import pytest

from rbxstatus.config import RateLimitSettings, Settings

STATUS_PAGE_HTML = """
<html>
  <body>
    <div class="page-status status-none">
      <h2 class="status">All Systems Operational</h2>
    </div>
    <div class="components-container">
      <div class="component">
        <span class="name"> Website </span>
        <span class="component-status">Operational</span>
      </div>
      <div class="component">
        <span class="name">Games</span>
        <span class="component-status">Major Outage</span>
      </div>
    </div>
  </body>
</html>
"""

STATUS_FEED_JSON = {
    "result": {
        "status_overall": {"status": "Service Disruption", "status_code": 500},
        "status": [
            {
                "name": "Player",
                "containers": [
                    {
                        "name": "Website",
                        "status": "Operational",
                        "status_code": 100,
                        "updated": "2024-05-01T10:00:00.000Z",
                    },
                    {
                        "name": "Avatar",
                        "status": "Major Outage",
                        "status_code": 500,
                    },
                ],
            },
            {
                "name": "Creator",
                "containers": [
                    {"name": "Studio", "status": "Operational", "status_code": 100},
                ],
            },
        ],
        "incidents": [],
    }
}


@pytest.fixture
def status_page_html() -> str:
    """HTML status page with one operational and one failing component."""
    return STATUS_PAGE_HTML


@pytest.fixture
def status_feed_json() -> dict:
    """Status.io style JSON feed with three components in two groups."""
    return STATUS_FEED_JSON


@pytest.fixture
def test_settings() -> Settings:
    """Settings without rate limiting, for handler tests."""
    return Settings(rate_limit=RateLimitSettings(enabled=False))
