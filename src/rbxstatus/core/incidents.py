"""Active incident detection."""

from rbxstatus.core.payload import MarkupPayload, RawPayload, StructuredPayload
from rbxstatus.models.status import IncidentSummary

UNRESOLVED_INCIDENT_SELECTOR = ".unresolved-incident"
PAGE_STATUS_SELECTOR = ".page-status"
BANNER_KEYWORDS = ("outage", "disruption")


def incident_message(active: bool, count: int) -> str:
    if active:
        return f"{count} active incident(s) detected"
    return "No active incidents detected"


def detect_incidents(payload: RawPayload) -> IncidentSummary:
    """Decide whether an incident is active.

    Structured feeds list incidents explicitly. On a scraped page, unresolved
    incident entries are counted, and a page banner mentioning an outage or
    disruption marks the page active even when no entry is present.
    """
    match payload:
        case StructuredPayload():
            incidents = payload.result.get("incidents") or []
            count = len(incidents) if isinstance(incidents, list) else 0
            active = count > 0
        case MarkupPayload():
            soup = payload.document
            count = len(soup.select(UNRESOLVED_INCIDENT_SELECTOR))
            banner = " ".join(
                el.get_text() for el in soup.select(PAGE_STATUS_SELECTOR)
            ).lower()
            active = count > 0 or any(word in banner for word in BANNER_KEYWORDS)
        case _:
            raise TypeError(f"Unsupported payload type: {type(payload).__name__}")

    return IncidentSummary(active=active, count=count, message=incident_message(active, count))
