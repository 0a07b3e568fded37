"""Health and readiness check routes."""

import logging

from fastapi import APIRouter, Request

from config import settings
from services.upstream import check_api_health, set_api_health

logger = logging.getLogger(__name__)

router = APIRouter()


def _upstreams() -> dict[str, str]:
    """Upstream APIs worth probing, keyed by the name used in health:<name>."""
    apis = {
        "jokeapi": settings.joke_api_url,
        "quotable": settings.quote_api_url,
        "cocktaildb": settings.cocktail_api_url,
    }
    if settings.calendarific_api_key:
        apis["calendarific"] = settings.calendarific_api_url
    if settings.excuse_api_url:
        apis["excuse"] = settings.excuse_api_url
    if settings.showerthought_api_url:
        apis["showerthought"] = settings.showerthought_api_url
    return apis


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "quirkit-api", "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Deep health check: key-value store plus every configured upstream API.

    Upstream outages only degrade the status since every feature has static
    fallback data.
    """
    store = request.app.state.kv
    result = {"status": "ok", "service": "quirkit-api", "commit": settings.git_sha, "store": "not_tested"}

    try:
        await store.ping()
        result["store"] = "connected"
    except Exception as e:
        logger.exception("Key-value store health check failed")
        result["status"] = "error"
        result["store"] = "error"
        result["store_error"] = str(e)

    apis = {}
    for name, url in _upstreams().items():
        healthy = await check_api_health(request.app.state.http, url)
        apis[name] = "ok" if healthy else "unreachable"
        try:
            await set_api_health(store, name, healthy)
        except Exception as e:
            logger.warning("Could not record health for %s: %s", name, e)
    result["apis"] = apis

    if result["status"] == "ok" and any(v != "ok" for v in apis.values()):
        result["status"] = "degraded"
    return result
