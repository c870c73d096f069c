"""
Local snapshot cache.

CACHING STRATEGY
================

What we cache:
  - The full customers and bookings collections, JSON-serialized
  - Cache key pattern: "{CACHE_KEY_PREFIX}{collection}", e.g. "cache_bookings"

When:
  - Write-through on every successful bulk load from the remote store
  - Each save replaces the previous snapshot for that collection (no merge,
    no versioning)

Read path:
  - Only when the remote bulk load fails; the store is then flagged
    `is_using_cache` and all commands are rejected until a fresh load

Failure handling:
  - Redis errors are logged and reported as a miss / skipped save. A cache
    problem never fails a bootstrap that already has remote data.
"""

import json
from typing import Any, Optional

import redis.asyncio as redis

from slotsync.core.config import get_settings
from slotsync.core.logging import get_logger
from slotsync.core.metrics import record_cache_operation
from slotsync.infrastructure.redis_client import get_redis
from slotsync.services.interfaces.cache import LocalCache

logger = get_logger(__name__)


class RedisCache(LocalCache):
    """Snapshot cache backed by Redis string keys."""

    def __init__(
        self,
        client: Optional[redis.Redis] = None,
        key_prefix: Optional[str] = None,
        ttl: Optional[int] = None,
    ):
        settings = get_settings()
        self._client = client
        self.key_prefix = settings.CACHE_KEY_PREFIX if key_prefix is None else key_prefix
        self.ttl = settings.CACHE_TTL if ttl is None else ttl

    def _make_key(self, collection: str) -> str:
        return f"{self.key_prefix}{collection}"

    async def _get_client(self) -> Optional[redis.Redis]:
        if self._client is None:
            self._client = await get_redis()
        return self._client

    async def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        client = await self._get_client()
        if not client:
            return

        key = self._make_key(collection)
        try:
            blob = json.dumps(records, default=str)
            if self.ttl:
                await client.setex(key, self.ttl, blob)
            else:
                await client.set(key, blob)
            record_cache_operation("save", "ok")
            logger.debug("cache_set", key=key, records=len(records))
        except Exception as e:
            record_cache_operation("save", "error")
            logger.error("cache_set_error", key=key, error=str(e))

    async def load(self, collection: str) -> Optional[list[dict[str, Any]]]:
        client = await self._get_client()
        if not client:
            return None

        key = self._make_key(collection)
        try:
            data = await client.get(key)
            if data:
                record_cache_operation("load", "hit")
                logger.debug("cache_hit", key=key)
                return json.loads(data)
            record_cache_operation("load", "miss")
            logger.debug("cache_miss", key=key)
        except Exception as e:
            record_cache_operation("load", "error")
            logger.error("cache_get_error", key=key, error=str(e))

        return None


class MemoryCache(LocalCache):
    """Process-local snapshot cache; lost on restart."""

    def __init__(self, snapshots: Optional[dict[str, list[dict[str, Any]]]] = None):
        self._snapshots = dict(snapshots or {})

    async def save(self, collection: str, records: list[dict[str, Any]]) -> None:
        # Round-trip through JSON so callers never share mutable records.
        self._snapshots[collection] = json.loads(json.dumps(records, default=str))
        record_cache_operation("save", "ok")

    async def load(self, collection: str) -> Optional[list[dict[str, Any]]]:
        records = self._snapshots.get(collection)
        record_cache_operation("load", "hit" if records is not None else "miss")
        if records is None:
            return None
        return json.loads(json.dumps(records))


def get_local_cache() -> LocalCache:
    """
    Get configured cache.

    CACHE_BACKEND=redis uses Redis (falls back to no-op reads/writes if Redis
    is disabled or down); CACHE_BACKEND=memory keeps snapshots in process.
    """
    settings = get_settings()
    if settings.CACHE_BACKEND == "memory":
        return MemoryCache()
    return RedisCache()
