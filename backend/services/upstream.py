"""Outbound HTTP helpers for the third-party APIs.

Transport failures are re-raised with messages the fallback classifier
recognises (``timeout`` / ``Network Error``). Non-2xx replies become an
``ExternalServiceError``, which is not fallback-worthy.
"""

import json
import logging
import time

import httpx

from errors import ExternalServiceError, UpstreamTimeout

logger = logging.getLogger(__name__)

HEALTH_TTL_SECONDS = 300


class NetworkError(Exception):
    """Connectivity failure talking to an upstream API."""


async def fetch_json(
    client: httpx.AsyncClient, url: str, service: str, params: dict | None = None
):
    """GET ``url`` and decode its JSON body."""
    try:
        resp = await client.get(url, params=params, headers={"Content-Type": "application/json"})
    except httpx.TimeoutException as e:
        raise UpstreamTimeout(f"Request timeout calling {service}: {e!r}") from e
    except httpx.TransportError as e:
        raise NetworkError(f"Network Error calling {service}: {e!r}") from e

    if resp.is_error:
        logger.warning("%s answered HTTP %d", service, resp.status_code)
        raise ExternalServiceError(service, f"HTTP {resp.status_code}: {resp.reason_phrase}")
    try:
        return resp.json()
    except json.JSONDecodeError as e:
        raise ExternalServiceError(service, f"invalid JSON body: {e}") from e


async def check_api_health(client: httpx.AsyncClient, url: str) -> bool:
    """HEAD ``url`` with a short timeout; any failure counts as unhealthy."""
    try:
        resp = await client.head(url, timeout=3.0)
    except httpx.HTTPError as e:
        logger.warning("Health check failed for %s: %s", url, e)
        return False
    return resp.is_success


async def set_api_health(store, api_name: str, healthy: bool) -> None:
    payload = {"healthy": healthy, "lastCheck": int(time.time() * 1000)}
    await store.set(f"health:{api_name}", json.dumps(payload), ex=HEALTH_TTL_SECONDS)


async def get_api_health(store, api_name: str) -> dict | None:
    raw = await store.get(f"health:{api_name}")
    return json.loads(raw) if raw else None
