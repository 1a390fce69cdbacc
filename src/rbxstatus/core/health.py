"""Health scoring and status classification."""

import math
from collections.abc import Sequence

from rbxstatus.models.status import (
    Component,
    HealthSummary,
    IncidentSummary,
    StatusState,
    StatusSummary,
)

# Upstream label -> weight. Matching is exact and case-sensitive.
STATUS_WEIGHTS: dict[str, int] = {
    "Operational": 100,
    "Degraded Performance": 90,
    "Degraded": 90,
    "Partial Outage": 60,
    "Major Outage": 20,
}

# Weight for labels missing from STATUS_WEIGHTS
FALLBACK_WEIGHT = 0

# Lowest percent a non-empty component list can score
HEALTH_FLOOR = 20

STATE_EMOJI: dict[StatusState, str] = {
    StatusState.OPERATIONAL: "🟢",
    StatusState.DEGRADED: "🟡",
    StatusState.PARTIAL: "🟠",
    StatusState.OUTAGE: "🔴",
}

# Health thresholds, highest first
OPERATIONAL_THRESHOLD = 95
DEGRADED_THRESHOLD = 80
PARTIAL_THRESHOLD = 40


def weight_for_label(label: str) -> int:
    """Look up the weight of an upstream status label."""
    return STATUS_WEIGHTS.get(label, FALLBACK_WEIGHT)


def health_state(percent: int) -> StatusState:
    """Classify a health percent into one of the four states."""
    if percent >= OPERATIONAL_THRESHOLD:
        return StatusState.OPERATIONAL
    if percent >= DEGRADED_THRESHOLD:
        return StatusState.DEGRADED
    if percent >= PARTIAL_THRESHOLD:
        return StatusState.PARTIAL
    return StatusState.OUTAGE


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def reduce_health(components: Sequence[Component]) -> HealthSummary:
    """Average component weights into a clamped health summary.

    An empty component list is treated as fully operational.
    """
    if not components:
        percent = 100
    else:
        mean = sum(c.weight for c in components) / len(components)
        percent = max(HEALTH_FLOOR, min(100, _round_half_up(mean)))

    state = health_state(percent)
    return HealthSummary(percent=percent, emoji=STATE_EMOJI[state], state=state)


def determine_status(health: HealthSummary, incidents: IncidentSummary) -> StatusSummary:
    """Combine health and incidents into the headline status.

    Only three outcomes exist here; an active incident or a percent below
    80 is reported as a disruption even when the health state is outage.
    """
    if incidents.active or health.percent < DEGRADED_THRESHOLD:
        state = StatusState.PARTIAL
        text = "Service Disruption"
    elif health.percent < OPERATIONAL_THRESHOLD:
        state = StatusState.DEGRADED
        text = "Minor Issues"
    else:
        state = StatusState.OPERATIONAL
        text = "All Systems Operational"

    return StatusSummary(text=text, emoji=STATE_EMOJI[state], state=state)
