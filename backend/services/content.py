"""Fun-tool content: live third-party data with static fallbacks.

Each getter resolves through ``services.fallback.resolve`` and any upstream
failure, including HTTP errors and unexpected payloads, degrades to bundled
data instead of an error. Optional upstreams (excuses, shower thoughts,
holidays without an API key) serve the bundled data directly.
"""

import logging
import random
from datetime import datetime, timezone

import httpx

from config import Settings
from errors import ConfigurationError
from services import data_loader
from services.cache import TTLCache
from services.fallback import resolve
from services.upstream import fetch_json

logger = logging.getLogger(__name__)

JOKE_BLACKLIST = "nsfw,religious,political,racist,sexist,explicit"
MAX_COCKTAIL_INGREDIENTS = 15


def today_utc() -> str:
    """Today's date as YYYY-MM-DD in UTC, so daily rotation is the same everywhere."""
    return datetime.now(timezone.utc).date().isoformat()


class ContentService:
    def __init__(self, cache: TTLCache, client: httpx.AsyncClient, settings: Settings):
        self.cache = cache
        self.client = client
        self.settings = settings

    async def _resolve(self, producer, pool, cache_key: str):
        """Resolve ``cache_key``; errors the resolver re-raises still end in ``pool``."""
        try:
            return await resolve(
                producer,
                pool,
                cache_key,
                self.cache,
                ttl_seconds=self.settings.cache_ttl,
                timeout=self.settings.api_timeout,
            )
        except ConfigurationError:
            raise
        except Exception as e:
            logger.warning("Serving fallback for %s after upstream error: %s", cache_key, e)
            return random.choice(pool)

    # ------------------------------------------------------------------
    # Excuse
    # ------------------------------------------------------------------

    async def get_excuse(self) -> dict:
        pool = data_loader.excuse_pool()
        if not self.settings.excuse_api_url:
            return random.choice(pool)

        async def producer() -> dict:
            data = await fetch_json(self.client, self.settings.excuse_api_url, "excuse")
            return {"excuse": data["excuse"], "source": "api"}

        return await self._resolve(producer, pool, "api:excuse:random")

    # ------------------------------------------------------------------
    # Joke (JokeAPI)
    # ------------------------------------------------------------------

    async def get_joke(self) -> dict:
        async def producer() -> dict:
            data = await fetch_json(
                self.client,
                self.settings.joke_api_url,
                "JokeAPI",
                params={"blacklistFlags": JOKE_BLACKLIST, "type": "single"},
            )
            joke = data.get("joke") or f"{data.get('setup', '')} {data.get('delivery', '')}".strip()
            return {"joke": joke, "type": "dad", "source": "api"}

        return await self._resolve(producer, data_loader.joke_pool(), "api:joke:random")

    # ------------------------------------------------------------------
    # Quote of the day (Quotable)
    # ------------------------------------------------------------------

    async def get_quote(self, date: str | None = None) -> dict:
        target_date = date or today_utc()
        daily_key = f"cache:quote:daily:{target_date}"

        try:
            cached = await self.cache.get(daily_key)
        except Exception as e:
            logger.warning("Daily quote cache read failed: %s", e)
            cached = None
        if cached is not None:
            return cached

        async def producer() -> dict:
            data = await fetch_json(self.client, self.settings.quote_api_url, "Quotable")
            return {
                "quote": data["content"],
                "author": data["author"],
                "date": target_date,
                "source": "api",
            }

        quote = await self._resolve(
            producer, data_loader.quote_pool(target_date), f"api:quote:daily:{target_date}"
        )

        try:
            await self.cache.set(daily_key, quote, ttl_seconds=self.settings.daily_cache_ttl)
        except Exception as e:
            logger.warning("Daily quote cache write failed: %s", e)
        return quote

    # ------------------------------------------------------------------
    # Shower thought
    # ------------------------------------------------------------------

    async def get_shower_thought(self) -> dict:
        pool = data_loader.shower_thought_pool()
        if not self.settings.showerthought_api_url:
            return random.choice(pool)

        async def producer() -> dict:
            data = await fetch_json(
                self.client, self.settings.showerthought_api_url, "shower thoughts"
            )
            return {"thought": data["thought"], "source": "api"}

        return await self._resolve(producer, pool, "api:showerthought:random")

    # ------------------------------------------------------------------
    # Holiday (Calendarific)
    # ------------------------------------------------------------------

    async def get_holiday(self, date: str | None = None) -> dict:
        target_date = date or today_utc()
        pool = data_loader.holiday_pool(target_date)
        if not self.settings.calendarific_api_key:
            return random.choice(pool)

        year, month, day = target_date.split("-")

        async def producer() -> dict:
            data = await fetch_json(
                self.client,
                self.settings.calendarific_api_url,
                "Calendarific",
                params={
                    "api_key": self.settings.calendarific_api_key,
                    "country": "US",
                    "year": int(year),
                    "month": int(month),
                    "day": int(day),
                },
            )
            holidays = data["response"]["holidays"]
            if not holidays:
                return random.choice(pool)
            holiday = holidays[0]
            return {
                "name": holiday["name"],
                "description": holiday["description"],
                "date": holiday["date"]["iso"],
                "source": "api",
            }

        return await self._resolve(producer, pool, f"api:holiday:{target_date}")

    # ------------------------------------------------------------------
    # Drink (TheCocktailDB)
    # ------------------------------------------------------------------

    async def get_drink(self) -> dict:
        async def producer() -> dict:
            data = await fetch_json(self.client, self.settings.cocktail_api_url, "TheCocktailDB")
            return _parse_cocktail(data["drinks"][0])

        return await self._resolve(producer, data_loader.drink_pool(), "api:drink:random")

    # ------------------------------------------------------------------
    # Timer break (local data only)
    # ------------------------------------------------------------------

    async def get_timer_break(self, break_type: str | None = None) -> dict:
        return random.choice(data_loader.timer_break_pool(break_type))


def _parse_cocktail(drink: dict) -> dict:
    """Flatten TheCocktailDB's strIngredientN/strMeasureN columns."""
    ingredients = []
    for i in range(1, MAX_COCKTAIL_INGREDIENTS + 1):
        ingredient = drink.get(f"strIngredient{i}")
        measure = drink.get(f"strMeasure{i}")
        if ingredient:
            ingredients.append(f"{measure.strip()} {ingredient}" if measure else ingredient)

    instructions = [step.strip() for step in (drink.get("strInstructions") or "").split(". ")]
    result = {
        "name": drink["strDrink"],
        "ingredients": ingredients,
        "instructions": [step for step in instructions if step],
        "source": "api",
    }
    if drink.get("strDrinkThumb"):
        result["image"] = drink["strDrinkThumb"]
    return result
