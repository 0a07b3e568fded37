"""Tests for the cache-aside fallback resolver and error classifier."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from errors import ConfigurationError, UpstreamTimeout
from services.fallback import ErrorClass, classify, resolve

POOL = ("static-a", "static-b", "static-c")


class TestClassify:
    @pytest.mark.parametrize(
        "message",
        [
            "getaddrinfo ENOTFOUND api.example.com",
            "connect ECONNREFUSED 127.0.0.1:443",
            "ETIMEDOUT while reading",
            "socket hang up ECONNRESET",
            "Network Error calling JokeAPI",
            "Request timeout",
            "read timeout after 5s",
        ],
    )
    def test_connectivity_messages_are_fallbackable(self, message):
        assert classify(RuntimeError(message)) is ErrorClass.FALLBACKABLE

    def test_class_name_is_matched_too(self):
        class ECONNRESETError(Exception):
            pass

        assert classify(ECONNRESETError("peer went away")) is ErrorClass.FALLBACKABLE

    def test_other_errors_are_fatal(self):
        assert classify(RuntimeError("some random failure")) is ErrorClass.FATAL
        assert classify(KeyError("content")) is ErrorClass.FATAL

    def test_matching_is_case_sensitive(self):
        assert classify(RuntimeError("Timeout")) is ErrorClass.FATAL
        assert classify(RuntimeError("network error")) is ErrorClass.FATAL

    def test_builtin_timeout_name_does_not_match(self):
        # "TimeoutError" has a capital T; the resolver wraps it in UpstreamTimeout.
        assert classify(asyncio.TimeoutError()) is ErrorClass.FATAL
        assert classify(UpstreamTimeout()) is ErrorClass.FALLBACKABLE


class TestResolve:
    @pytest.mark.asyncio
    async def test_cache_hit_skips_producer(self, cache):
        await cache.set("api:joke:random", {"joke": "cached"}, ttl_seconds=60)
        producer = AsyncMock(return_value={"joke": "fresh"})

        result = await resolve(producer, POOL, "api:joke:random", cache)

        assert result == {"joke": "cached"}
        producer.assert_not_called()

    @pytest.mark.asyncio
    async def test_miss_calls_producer_and_caches(self, cache):
        producer = AsyncMock(return_value={"joke": "fresh"})

        result = await resolve(producer, POOL, "api:joke:random", cache, ttl_seconds=60)

        assert result == {"joke": "fresh"}
        producer.assert_awaited_once()
        assert await cache.get("api:joke:random") == {"joke": "fresh"}

    @pytest.mark.asyncio
    async def test_fallbackable_failure_returns_pool_member(self, cache):
        producer = AsyncMock(side_effect=RuntimeError("connect ECONNREFUSED"))

        result = await resolve(producer, POOL, "api:joke:random", cache)

        assert result in POOL
        assert await cache.get("api:joke:random") is None

    @pytest.mark.asyncio
    async def test_fatal_failure_is_reraised(self, cache):
        error = RuntimeError("some random failure")
        producer = AsyncMock(side_effect=error)

        with pytest.raises(RuntimeError) as exc_info:
            await resolve(producer, POOL, "api:joke:random", cache)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_slow_producer_times_out_and_is_cancelled(self, cache):
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return "too late"

        result = await resolve(slow, POOL, "api:slow", cache, timeout=0.01)

        assert result in POOL
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_empty_pool_fails_loudly(self, cache):
        producer = AsyncMock(return_value="fresh")

        with pytest.raises(ConfigurationError):
            await resolve(producer, (), "api:empty", cache)
        producer.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_write_failure_does_not_mask_result(self, cache, monkeypatch):
        monkeypatch.setattr(cache, "set", AsyncMock(side_effect=ConnectionError("store down")))
        producer = AsyncMock(return_value="fresh")

        assert await resolve(producer, POOL, "api:joke:random", cache) == "fresh"

    @pytest.mark.asyncio
    async def test_cache_read_failure_is_a_miss(self, cache, monkeypatch):
        monkeypatch.setattr(cache, "get", AsyncMock(side_effect=ConnectionError("store down")))
        producer = AsyncMock(return_value="fresh")

        assert await resolve(producer, POOL, "api:joke:random", cache) == "fresh"
        producer.assert_awaited_once()
