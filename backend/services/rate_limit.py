"""Fixed-window request counter kept in the key-value store.

The count is read before it is incremented, so concurrent requests at the
edge of a window can overshoot ``limit`` slightly. Treat it as a soft limit.
Rejected requests do not consume a slot.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int


async def check_rate_limit(store, key: str, limit: int, window_seconds: int) -> RateLimitResult:
    counter = f"rate:{key}"
    current = int(await store.get(counter) or 0)
    if current >= limit:
        return RateLimitResult(allowed=False, remaining=0)

    count = await store.incr(counter)
    if count == 1:
        await store.expire(counter, window_seconds)
    return RateLimitResult(allowed=True, remaining=max(limit - count, 0))
