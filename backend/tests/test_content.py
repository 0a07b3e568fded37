"""ContentService against fake upstream APIs."""

import asyncio

import httpx
import pytest

from config import settings
from services import data_loader
from services.content import ContentService, _parse_cocktail


def _json(payload, status=200):
    return lambda request: httpx.Response(status, json=payload)


class TestJoke:
    @pytest.mark.asyncio
    async def test_live_joke_is_cached(self, content, upstream, cache):
        calls = []

        def jokeapi(request):
            calls.append(request)
            assert request.url.params["type"] == "single"
            return httpx.Response(200, json={"joke": "Live joke", "type": "single"})

        upstream["v2.jokeapi.dev"] = jokeapi

        first = await content.get_joke()
        second = await content.get_joke()

        assert first == {"joke": "Live joke", "type": "dad", "source": "api"}
        assert second == first
        assert len(calls) == 1
        assert await cache.get("api:joke:random") == first

    @pytest.mark.asyncio
    async def test_two_part_joke(self, content, upstream):
        upstream["v2.jokeapi.dev"] = _json({"setup": "Why?", "delivery": "Because."})

        assert (await content.get_joke())["joke"] == "Why? Because."

    @pytest.mark.asyncio
    async def test_unreachable_upstream_serves_fallback(self, content):
        result = await content.get_joke()

        assert result in data_loader.joke_pool()
        assert result["source"] == "fallback"

    @pytest.mark.asyncio
    async def test_upstream_timeout_serves_fallback(self, content, upstream):
        def slow(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        upstream["v2.jokeapi.dev"] = slow

        assert (await content.get_joke())["source"] == "fallback"

    @pytest.mark.asyncio
    async def test_http_error_serves_fallback(self, content, upstream, cache):
        upstream["v2.jokeapi.dev"] = _json({"error": True}, status=500)

        result = await content.get_joke()

        assert result in data_loader.joke_pool()
        assert await cache.get("api:joke:random") is None


class TestQuote:
    @pytest.mark.asyncio
    async def test_live_quote_is_stored_as_daily_quote(self, content, upstream, cache):
        upstream["api.quotable.io"] = _json({"content": "Be curious.", "author": "Someone"})

        result = await content.get_quote("2026-10-19")

        assert result == {"quote": "Be curious.", "author": "Someone", "date": "2026-10-19", "source": "api"}
        assert await cache.get("cache:quote:daily:2026-10-19") == result

    @pytest.mark.asyncio
    async def test_daily_cache_wins(self, content, cache):
        daily = {"quote": "Yesterday's wisdom", "author": "Cache", "date": "2026-10-19", "source": "api"}
        await cache.set("cache:quote:daily:2026-10-19", daily, ttl_seconds=86400)

        assert await content.get_quote("2026-10-19") == daily

    @pytest.mark.asyncio
    async def test_fallback_quote_carries_requested_date(self, content):
        result = await content.get_quote("2026-03-14")

        assert result["date"] == "2026-03-14"
        assert result["source"] == "fallback"


class TestHoliday:
    @pytest.mark.asyncio
    async def test_without_api_key_matches_bundled_holiday(self, content):
        result = await content.get_holiday("2026-03-14")

        assert result["name"] == "Pi Day"
        assert result["date"] == "2026-03-14"
        assert result["source"] == "fallback"

    @pytest.mark.asyncio
    async def test_no_bundled_holiday(self, content):
        result = await content.get_holiday("2026-04-02")

        assert result["name"] == "No Special Holiday Today"

    @pytest.mark.asyncio
    async def test_calendarific(self, cache, http_client, upstream, monkeypatch):
        monkeypatch.setattr(settings, "calendarific_api_key", "secret")
        seen = {}

        def calendarific(request):
            seen.update(request.url.params)
            return httpx.Response(
                200,
                json={"response": {"holidays": [
                    {"name": "Boss's Day", "description": "Be nice.", "date": {"iso": "2026-10-16"}}
                ]}},
            )

        upstream["calendarific.com"] = calendarific
        service = ContentService(cache, http_client, settings)

        result = await service.get_holiday("2026-10-16")

        assert result == {"name": "Boss's Day", "description": "Be nice.", "date": "2026-10-16", "source": "api"}
        assert (seen["month"], seen["day"], seen["api_key"]) == ("10", "16", "secret")


class TestDrink:
    @pytest.mark.asyncio
    async def test_cocktaildb(self, content, upstream):
        upstream["www.thecocktaildb.com"] = _json({"drinks": [{
            "strDrink": "Mojito",
            "strInstructions": "Muddle mint. Add rum. Top with soda.",
            "strDrinkThumb": "https://example.com/mojito.jpg",
            "strIngredient1": "Mint", "strMeasure1": "10 leaves ",
            "strIngredient2": "Rum", "strMeasure2": None,
            "strIngredient3": None,
        }]})

        result = await content.get_drink()

        assert result["name"] == "Mojito"
        assert result["ingredients"] == ["10 leaves Mint", "Rum"]
        assert result["instructions"] == ["Muddle mint", "Add rum", "Top with soda."]
        assert result["image"] == "https://example.com/mojito.jpg"

    @pytest.mark.asyncio
    async def test_unexpected_payload_serves_fallback(self, content, upstream):
        upstream["www.thecocktaildb.com"] = _json({"drinks": None})

        result = await content.get_drink()

        assert result in data_loader.drink_pool()
        assert result["source"] == "fallback"

    def test_parse_without_image(self):
        result = _parse_cocktail({"strDrink": "Water", "strInstructions": "Pour."})

        assert "image" not in result
        assert result["ingredients"] == []


class TestLocalOnly:
    @pytest.mark.asyncio
    async def test_excuse_without_upstream(self, content):
        assert (await content.get_excuse()) in data_loader.excuse_pool()

    @pytest.mark.asyncio
    async def test_excuse_with_upstream(self, cache, http_client, upstream, monkeypatch):
        monkeypatch.setattr(settings, "excuse_api_url", "https://excuses.example.com/random")
        upstream["excuses.example.com"] = _json({"excuse": "The dog ate my router."})

        service = ContentService(cache, http_client, settings)

        assert await service.get_excuse() == {"excuse": "The dog ate my router.", "source": "api"}

    @pytest.mark.asyncio
    async def test_shower_thought(self, content):
        assert (await content.get_shower_thought())["source"] == "fallback"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("break_type", ["short", "long"])
    async def test_timer_respects_type(self, content, break_type):
        results = await asyncio.gather(*(content.get_timer_break(break_type) for _ in range(10)))

        assert {r["type"] for r in results} == {break_type}
