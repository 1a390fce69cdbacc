"""Status pipeline: fetch, extract, score, cache and wrap."""

import asyncio
import logging
import time
from typing import Any

from rbxstatus.config import Settings
from rbxstatus.core.cache import ResultCache, cache_key
from rbxstatus.core.envelope import build_envelope
from rbxstatus.core.extractor import extract_components
from rbxstatus.core.fetcher import SourceFetcher
from rbxstatus.core.health import determine_status, reduce_health
from rbxstatus.core.incidents import detect_incidents
from rbxstatus.core.timestamps import DEFAULT_TIMEZONE, format_timestamp, validate_timezone
from rbxstatus.models.status import ResultMeta, StatusResult

logger = logging.getLogger(__name__)


class StatusService:
    """Serves normalized status envelopes, one cache entry per timezone.

    The service owns its fetcher and cache; one instance is created per
    application and shared by all requests.
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        cache: ResultCache,
        single_flight: bool = False,
    ):
        self.fetcher = fetcher
        self.cache = cache
        self.single_flight = single_flight
        self._in_flight: dict[str, asyncio.Future[StatusResult]] = {}

    @classmethod
    def from_settings(cls, settings: Settings, cache: ResultCache | None = None) -> "StatusService":
        if cache is None:
            cache = ResultCache(ttl_ms=settings.cache.ttl_ms)
        return cls(
            fetcher=SourceFetcher.from_settings(settings.scraper),
            cache=cache,
            single_flight=settings.cache.single_flight,
        )

    async def get_status(
        self,
        tz: str = DEFAULT_TIMEZONE,
        force_refresh: bool = False,
    ) -> dict[str, Any]:
        """Return the status envelope for ``tz``.

        An empty ``tz`` means the default timezone.

        Raises:
            InvalidTimezoneError: Before any network call, if ``tz`` is not allowed.
            UpstreamTimeoutError: If the upstream timed out after all retries.
            UpstreamUnreachableError: If the upstream failed otherwise.
        """
        tz = tz or DEFAULT_TIMEZONE
        validate_timezone(tz)
        key = cache_key(tz)

        if not force_refresh:
            hit = await self.cache.get(key)
            if hit is not None:
                logger.debug("Cache hit", extra={"timezone": tz, "cache_key": key})
                result = hit.result.model_copy(update={"updated": format_timestamp(tz)})
                return build_envelope(result, cached=True, cache_age_seconds=hit.age_seconds)

        result = await self._refresh(key, tz)

        logger.info(
            "Status request completed",
            extra={"timezone": tz, "cached": False, "health_percent": result.health.percent},
        )
        return build_envelope(result, cached=False)

    async def _refresh(self, key: str, tz: str) -> StatusResult:
        if not self.single_flight:
            return await self._fetch_and_store(key, tz)

        pending = self._in_flight.get(key)
        if pending is not None:
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled() or asyncio.current_task().cancelling():
                    raise
                # The leading request was cancelled, not this one
                return await self._refresh(key, tz)

        future: asyncio.Future[StatusResult] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            result = await self._fetch_and_store(key, tz)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Waiters re-raise it; mark it retrieved for the no-waiter case
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._in_flight.pop(key, None)

    async def _fetch_and_store(self, key: str, tz: str) -> StatusResult:
        result = await self.fetch_status(tz)
        await self.cache.set(key, result)
        return result

    async def fetch_status(self, tz: str = DEFAULT_TIMEZONE) -> StatusResult:
        """Run the uncached pipeline once."""
        start = time.perf_counter()

        try:
            payload = await self.fetcher.fetch()
        except Exception as e:
            logger.error(
                "Failed to fetch Roblox status",
                extra={
                    "error_type": type(e).__name__,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                },
            )
            raise

        components = extract_components(payload)
        health = reduce_health(components)
        incidents = detect_incidents(payload)
        status = determine_status(health, incidents)

        duration_ms = int((time.perf_counter() - start) * 1000)
        result = StatusResult(
            status=status,
            health=health,
            components=components,
            incidents=incidents,
            updated=format_timestamp(tz),
            meta=ResultMeta(source=self.fetcher.url, scrape_duration=duration_ms),
        )

        logger.info(
            "Status fetched successfully",
            extra={
                "duration_ms": duration_ms,
                "health_percent": health.percent,
                "incident_count": incidents.count,
            },
        )
        return result
