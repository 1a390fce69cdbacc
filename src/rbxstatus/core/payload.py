"""Raw upstream payload variants."""

from dataclasses import dataclass
from functools import cached_property
from typing import Any, TypeAlias

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class StructuredPayload:
    """Decoded JSON document from a Status.io style status feed."""

    data: dict[str, Any]

    @property
    def result(self) -> dict[str, Any]:
        """The document's ``result`` object, or an empty dict."""
        result = self.data.get("result")
        return result if isinstance(result, dict) else {}


@dataclass(frozen=True)
class MarkupPayload:
    """HTML text of a hosted status page."""

    html: str

    @cached_property
    def document(self) -> BeautifulSoup:
        """Parsed page, built once and shared by the extractors."""
        return BeautifulSoup(self.html, "html.parser")


RawPayload: TypeAlias = StructuredPayload | MarkupPayload
