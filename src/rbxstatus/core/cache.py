"""Time-boxed result cache with in-process and Redis backends."""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from rbxstatus.config import CacheSettings
from rbxstatus.models.status import StatusResult

logger = logging.getLogger(__name__)

KEY_PREFIX = "roblox:status:"
DEFAULT_TTL_MS = 60000


def epoch_millis() -> int:
    return int(time.time() * 1000)


def cache_key(tz: str) -> str:
    """Cache key for results rendered in ``tz``."""
    return f"{KEY_PREFIX}{tz}"


@dataclass(frozen=True)
class CacheEntry:
    """A stored result and the time it was stored."""

    result: StatusResult
    stored_at_ms: int


@dataclass(frozen=True)
class CacheHit:
    """A cache lookup that found a live entry."""

    result: StatusResult
    age_seconds: int


class CacheBackend(Protocol):
    """Storage for cache entries. Expiry is enforced by ResultCache."""

    name: str

    async def get(self, key: str) -> CacheEntry | None: ...

    async def set(self, key: str, entry: CacheEntry, ttl_ms: int) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def clear(self) -> None: ...

    async def close(self) -> None: ...


class MemoryCacheBackend:
    """In-process dictionary store."""

    name = "memory"

    def __init__(self):
        self._entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    async def set(self, key: str, entry: CacheEntry, ttl_ms: int) -> None:
        self._entries[key] = entry

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    async def clear(self) -> None:
        self._entries.clear()

    async def close(self) -> None:
        self._entries.clear()


class RedisCacheBackend:
    """Redis store holding JSON-encoded entries with a server-side expiry."""

    name = "redis"

    def __init__(self, client: redis.Redis):
        self._client = client

    async def get(self, key: str) -> CacheEntry | None:
        raw = await self._client.get(key)
        if raw is None:
            return None
        data = json.loads(raw)
        return CacheEntry(
            result=StatusResult.model_validate(data["result"]),
            stored_at_ms=int(data["stored_at_ms"]),
        )

    async def set(self, key: str, entry: CacheEntry, ttl_ms: int) -> None:
        value = json.dumps(
            {
                "result": entry.result.model_dump(mode="json"),
                "stored_at_ms": entry.stored_at_ms,
            }
        )
        # A zero TTL still stores; ResultCache treats the entry as expired
        await self._client.set(key, value, px=ttl_ms if ttl_ms > 0 else None)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def clear(self) -> None:
        keys = [key async for key in self._client.scan_iter(match=f"{KEY_PREFIX}*")]
        if keys:
            await self._client.delete(*keys)

    async def close(self) -> None:
        await self._client.aclose()


async def select_cache_backend(settings: CacheSettings) -> CacheBackend:
    """Pick the cache backend once at startup.

    Redis is used when enabled and reachable. If the initial ping fails, a
    single warning is logged and the in-process store is used for the
    lifetime of the process.
    """
    if not settings.redis_enabled or not settings.redis_url:
        return MemoryCacheBackend()

    client = redis.from_url(settings.redis_url, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.warning(
            "Redis connection failed, falling back to memory cache",
            extra={"error_type": type(e).__name__},
        )
        await client.aclose()
        return MemoryCacheBackend()

    logger.info("Redis connected successfully")
    return RedisCacheBackend(client)


class ResultCache:
    """Keyed cache of status results with a fixed time-to-live.

    Entries expire lazily: a lookup at or beyond the TTL is a miss and drops
    the entry. Nothing sweeps in the background.
    """

    def __init__(
        self,
        backend: CacheBackend | None = None,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = epoch_millis,
    ):
        self.backend = backend or MemoryCacheBackend()
        self.ttl_ms = ttl_ms
        self._clock = clock

    @property
    def backend_name(self) -> str:
        return self.backend.name

    async def get(self, key: str) -> CacheHit | None:
        """Look up ``key``. A backend failure is logged and treated as a miss."""
        try:
            entry = await self.backend.get(key)
        except (RedisError, OSError) as e:
            logger.warning(
                f"Cache read failed, treating as miss: {e}",
                extra={"cache_key": key, "backend": self.backend_name, "error_type": type(e).__name__},
            )
            return None

        if entry is None:
            return None

        age_ms = self._clock() - entry.stored_at_ms
        if age_ms >= self.ttl_ms:
            await self._discard(key)
            return None

        return CacheHit(result=entry.result, age_seconds=max(0, age_ms) // 1000)

    async def set(self, key: str, result: StatusResult) -> None:
        """Store ``result`` under ``key``. A backend failure skips the store."""
        entry = CacheEntry(result=result, stored_at_ms=self._clock())
        try:
            await self.backend.set(key, entry, self.ttl_ms)
        except (RedisError, OSError) as e:
            logger.warning(
                f"Cache write failed, result not stored: {e}",
                extra={"cache_key": key, "backend": self.backend_name, "error_type": type(e).__name__},
            )

    async def _discard(self, key: str) -> None:
        try:
            await self.backend.delete(key)
        except (RedisError, OSError) as e:
            logger.warning(
                f"Cache delete failed: {e}",
                extra={"cache_key": key, "backend": self.backend_name, "error_type": type(e).__name__},
            )

    async def delete(self, key: str) -> None:
        await self.backend.delete(key)

    async def clear(self) -> None:
        await self.backend.clear()

    async def close(self) -> None:
        await self.backend.close()
