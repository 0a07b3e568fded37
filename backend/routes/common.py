"""Shared route plumbing: response envelope, CORS preflight, app-owned services."""

import logging

from fastapi import APIRouter, Request, Response

from config import settings
from errors import RateLimitExceeded
from services.content import ContentService
from services.rate_limit import check_rate_limit

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}


def success(data) -> dict:
    return {"success": True, "data": data}


async def cors_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


# Preflight routes carry no rate-limit dependency.
preflight_router = APIRouter(prefix="/api")


def add_preflight(path: str) -> None:
    """Answer plain OPTIONS requests on ``/api<path>`` with CORS headers."""
    preflight_router.add_api_route(path, cors_preflight, methods=["OPTIONS"], include_in_schema=False)


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content


def get_compliment_store(request: Request):
    return request.app.state.compliments


async def enforce_rate_limit(request: Request) -> None:
    """Per-client fixed-window limit on every /api route. Fails open."""
    client = request.client.host if request.client else "anonymous"
    key = f"{request.url.path}:{client}"
    try:
        result = await check_rate_limit(
            request.app.state.kv, key, settings.rate_limit_max, settings.rate_limit_window
        )
    except Exception as e:
        logger.warning("Rate limiter unavailable, allowing request: %s", e)
        return
    if not result.allowed:
        raise RateLimitExceeded()
