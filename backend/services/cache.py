"""TTL-aware JSON cache on top of the key-value store.

Entries are stored as ``{"data": ..., "timestamp": <epoch ms>, "ttl": <s>}``.
The store's own expiry normally removes them, but the envelope is checked on
every read as well: an entry older than its ttl, or one that no longer parses,
is deleted and reported as a miss.
"""

import json
import logging
import time
from typing import Any

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class TTLCache:
    def __init__(self, store):
        self._store = store

    async def get(self, key: str) -> Any | None:
        raw = await self._store.get(key)
        if raw is None:
            return None

        try:
            entry = json.loads(raw)
            age = (_now_ms() - entry["timestamp"]) / 1000
            expired = age > entry["ttl"]
        except (TypeError, ValueError, KeyError) as e:
            logger.warning("Dropping malformed cache entry %s: %s", key, e)
            await self._store.delete(key)
            return None

        if expired:
            await self._store.delete(key)
            return None
        return entry["data"]

    async def set(self, key: str, data: Any, ttl_seconds: int = 300) -> None:
        entry = {"data": data, "timestamp": _now_ms(), "ttl": ttl_seconds}
        await self._store.set(key, json.dumps(entry), ex=ttl_seconds)
