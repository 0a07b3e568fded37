"""Cache-aside resolution with static fallback data.

``resolve`` hides upstream connectivity problems from callers: it serves a
cached value when there is one, otherwise calls the producer under a timeout,
and if the producer fails with a network/timeout class error it answers with
a random element of a static fallback pool instead. Any other error is
re-raised so programming and validation mistakes still surface.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum
from typing import TypeVar

from errors import ConfigurationError, UpstreamTimeout
from services.cache import TTLCache

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Case-sensitive tokens marking an error as a connectivity failure.
FALLBACK_TRIGGERS = (
    "ENOTFOUND",
    "ECONNREFUSED",
    "ETIMEDOUT",
    "ECONNRESET",
    "Network Error",
    "timeout",
)


class ErrorClass(str, Enum):
    FALLBACKABLE = "fallbackable"
    FATAL = "fatal"


def classify(error: BaseException) -> ErrorClass:
    """FALLBACKABLE iff the error's message or class name holds a trigger token."""
    message = str(error)
    name = type(error).__name__
    for token in FALLBACK_TRIGGERS:
        if token in message or token in name:
            return ErrorClass.FALLBACKABLE
    return ErrorClass.FATAL


async def _call_with_timeout(producer: Callable[[], Awaitable[T]], timeout: float) -> T:
    # wait_for cancels the producer when the deadline passes.
    try:
        return await asyncio.wait_for(producer(), timeout)
    except asyncio.TimeoutError as e:
        raise UpstreamTimeout(f"Request timeout after {timeout}s") from e


async def resolve(
    producer: Callable[[], Awaitable[T]],
    fallback_pool: Sequence[T],
    cache_key: str,
    cache: TTLCache,
    ttl_seconds: int = 300,
    timeout: float = 5.0,
) -> T:
    """Return cached data, fresh producer data, or a random fallback.

    Args:
        producer: Zero-argument coroutine function fetching live data.
        fallback_pool: Non-empty static values to pick from on connectivity failure.
        cache_key: Key the producer's result is cached under.
        cache: TTL cache shared across requests.
        ttl_seconds: Lifetime of a freshly cached value.
        timeout: Seconds the producer may run before it is cancelled.

    Raises:
        ConfigurationError: If ``fallback_pool`` is empty.
        Exception: Whatever the producer raised, when it is not fallback-worthy.
    """
    if not fallback_pool:
        raise ConfigurationError(f"Fallback pool for {cache_key} is empty")

    try:
        cached = await cache.get(cache_key)
    except Exception as e:
        logger.warning("Cache read failed for %s, treating as miss: %s", cache_key, e)
        cached = None
    if cached is not None:
        return cached

    try:
        result = await _call_with_timeout(producer, timeout)
    except Exception as e:
        if classify(e) is ErrorClass.FATAL:
            raise
        logger.warning("Upstream for %s unavailable, serving fallback: %s", cache_key, e)
        return random.choice(fallback_pool)

    try:
        await cache.set(cache_key, result, ttl_seconds=ttl_seconds)
    except Exception as e:
        logger.warning("Cache write failed for %s: %s", cache_key, e)
    return result
