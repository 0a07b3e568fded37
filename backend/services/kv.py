"""Key-value store used for caching, rate limiting and compliments.

Production talks to Redis through ``redis.asyncio``. Without ``REDIS_URL`` the
app falls back to ``MemoryKVStore``, an in-process stand-in exposing the same
subset of the Redis API (string values, counters, lists, hashes, expiry).

Note: Each uvicorn worker has its own MemoryKVStore. Rate limits and cached
values are therefore per worker unless Redis is configured.
"""

import logging
import time
from typing import Any

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class MemoryKVStore:
    """Async in-memory store mirroring the redis.asyncio calls the app uses."""

    def __init__(self):
        self._store: dict[str, Any] = {}
        self._expires: dict[str, float] = {}

    def _alive(self, key: str) -> bool:
        expires_at = self._expires.get(key)
        if expires_at is not None and time.time() >= expires_at:
            self._store.pop(key, None)
            del self._expires[key]
        return key in self._store

    async def get(self, key: str) -> str | None:
        if self._alive(key):
            return self._store[key]
        return None

    async def set(self, key: str, value: Any, ex: int | None = None) -> bool:
        self._store[key] = str(value)
        self._expires.pop(key, None)
        if ex is not None:
            self._expires[key] = time.time() + ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._alive(key):
                removed += 1
            self._store.pop(key, None)
            self._expires.pop(key, None)
        return removed

    async def incr(self, key: str) -> int:
        value = int(self._store[key]) + 1 if self._alive(key) else 1
        self._store[key] = str(value)
        return value

    async def expire(self, key: str, seconds: int) -> bool:
        if not self._alive(key):
            return False
        self._expires[key] = time.time() + seconds
        return True

    async def lpush(self, key: str, *values: Any) -> int:
        items = self._store[key] if self._alive(key) else []
        for value in values:
            items.insert(0, str(value))
        self._store[key] = items
        return len(items)

    async def lrange(self, key: str, start: int, end: int) -> list[str]:
        if not self._alive(key):
            return []
        items = self._store[key]
        # Redis ranges are inclusive; -1 means "to the end".
        stop = len(items) if end == -1 else end + 1
        return list(items[start:stop])

    async def hset(self, key: str, mapping: dict[str, Any]) -> int:
        fields = self._store[key] if self._alive(key) else {}
        added = sum(1 for field in mapping if field not in fields)
        fields.update({field: str(value) for field, value in mapping.items()})
        self._store[key] = fields
        return added

    async def hgetall(self, key: str) -> dict[str, str]:
        if not self._alive(key):
            return {}
        return dict(self._store[key])

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self._store.clear()
        self._expires.clear()


def build_store(redis_url: str | None):
    """Return a Redis client for ``redis_url`` or a MemoryKVStore when unset."""
    if redis_url:
        logger.info("Using Redis key-value store")
        return redis.from_url(redis_url, decode_responses=True)
    logger.info("REDIS_URL not set, using in-memory key-value store")
    return MemoryKVStore()
