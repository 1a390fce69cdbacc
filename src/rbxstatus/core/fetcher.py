"""Upstream status source fetcher."""

import asyncio
import logging
from typing import Literal

import httpx

from rbxstatus.config import DEFAULT_USER_AGENT, ScraperSettings
from rbxstatus.core.payload import MarkupPayload, RawPayload, StructuredPayload
from rbxstatus.utils.errors import UpstreamTimeoutError, UpstreamUnreachableError
from rbxstatus.utils.retry import RetryError, is_timeout_error, retry_with_backoff

logger = logging.getLogger(__name__)

SourceFormat = Literal["auto", "json", "html"]

ACCEPT_HEADERS: dict[str, str] = {
    "json": "application/json",
    "html": "text/html",
    "auto": "application/json, text/html;q=0.9",
}


class SourceFetcher:
    """Fetches the upstream status source with a timeout and bounded retries.

    Each call makes one attempt plus up to ``max_retries`` retries, waiting
    ``n * retry_delay_seconds`` before retry ``n``. Once retries are
    exhausted the failure is classified as a timeout (504) or as an
    unreachable upstream (502).
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        source_format: SourceFormat = "auto",
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.source_format = source_format
        self.user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: ScraperSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SourceFetcher":
        """Build a fetcher from scraper settings (millisecond values)."""
        return cls(
            url=settings.url,
            timeout_seconds=settings.timeout_ms / 1000,
            max_retries=settings.retries,
            retry_delay_seconds=settings.retry_delay_ms / 1000,
            source_format=settings.source_format,
            user_agent=settings.user_agent,
            transport=transport,
        )

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": ACCEPT_HEADERS[self.source_format],
        }

    async def fetch(self) -> RawPayload:
        """Fetch and tag the upstream payload.

        Returns:
            A StructuredPayload or MarkupPayload.

        Raises:
            UpstreamTimeoutError: If the final attempt timed out.
            UpstreamUnreachableError: For any other failure.
        """
        try:
            response = await retry_with_backoff(
                self._get,
                max_retries=self.max_retries,
                base_delay=self.retry_delay_seconds,
            )
        except RetryError as e:
            raise self._classify(e.original_error, attempts=e.attempts) from e
        except httpx.HTTPError as e:
            # Non-retryable, e.g. a 404 from the upstream
            raise self._classify(e, attempts=1) from e

        return self._to_payload(response)

    async def _get(self) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds,
            headers=self.headers,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            # httpx timeouts apply per phase; this bounds the whole call
            async with asyncio.timeout(self.timeout_seconds):
                response = await client.get(self.url)
            response.raise_for_status()
            return response

    def _classify(
        self, error: Exception, attempts: int
    ) -> UpstreamTimeoutError | UpstreamUnreachableError:
        details = {
            "originalError": str(error) or type(error).__name__,
            "attempts": attempts,
        }
        if is_timeout_error(error):
            return UpstreamTimeoutError(details=details)
        return UpstreamUnreachableError(details=details)

    def _to_payload(self, response: httpx.Response) -> RawPayload:
        if self._is_structured(response):
            try:
                data = response.json()
            except ValueError as e:
                raise UpstreamUnreachableError(
                    details={"originalError": f"Invalid JSON from upstream: {e}"}
                ) from e
            if not isinstance(data, dict):
                raise UpstreamUnreachableError(
                    details={"originalError": "Upstream JSON document is not an object"}
                )
            return StructuredPayload(data=data)
        return MarkupPayload(html=response.text)

    def _is_structured(self, response: httpx.Response) -> bool:
        if self.source_format == "json":
            return True
        if self.source_format == "html":
            return False
        content_type = response.headers.get("content-type", "")
        return "json" in content_type.lower()
