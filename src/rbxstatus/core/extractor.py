"""Component extraction from structured feeds and scraped status pages."""

import logging
from typing import Any

from bs4 import BeautifulSoup, Tag

from rbxstatus.core.health import weight_for_label
from rbxstatus.core.payload import MarkupPayload, RawPayload, StructuredPayload
from rbxstatus.models.status import Component

logger = logging.getLogger(__name__)

COMPONENT_SELECTOR = ".component"
NAME_SELECTOR = ".name"
STATUS_SELECTORS = (".component-status", ".status")


def extract_components(payload: RawPayload) -> list[Component]:
    """Turn an upstream payload into components, preserving upstream order."""
    match payload:
        case StructuredPayload():
            components = _from_structured(payload.result)
        case MarkupPayload():
            components = _from_markup(payload.document)
        case _:
            raise TypeError(f"Unsupported payload type: {type(payload).__name__}")

    if not components:
        logger.warning("No components found in upstream payload")
    return components


def _structured_weight(container: dict[str, Any], label: str) -> int:
    # Status.io codes 100..600 are not weights; only 0..100 is taken as-is
    code = container.get("status_code")
    if isinstance(code, int) and not isinstance(code, bool) and 0 <= code <= 100:
        return code
    return weight_for_label(label)


def _from_structured(result: dict[str, Any]) -> list[Component]:
    components = []

    for group in result.get("status") or []:
        if not isinstance(group, dict):
            continue
        category = str(group.get("name") or "").strip()

        for container in group.get("containers") or []:
            if not isinstance(container, dict):
                continue
            name = str(container.get("name") or "").strip()
            if not name:
                continue
            label = str(container.get("status") or "").strip()
            updated = container.get("updated")

            components.append(
                Component(
                    name=name,
                    category=category,
                    status=label,
                    weight=_structured_weight(container, label),
                    updated=str(updated) if updated is not None else None,
                )
            )

    return components


def _select_text(element: Tag, selectors: tuple[str, ...]) -> str:
    for selector in selectors:
        found = element.select_one(selector)
        if found is not None:
            return found.get_text().strip()
    return ""


def _from_markup(soup: BeautifulSoup) -> list[Component]:
    components = []

    for element in soup.select(COMPONENT_SELECTOR):
        name = _select_text(element, (NAME_SELECTOR,))
        label = _select_text(element, STATUS_SELECTORS)
        if not name or not label:
            continue
        components.append(
            Component(name=name, status=label, weight=weight_for_label(label))
        )

    return components
