"""Shared fixtures: in-memory store, fake upstream APIs and a wired test app."""

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from config import settings
from services.cache import TTLCache
from services.compliments import MemoryComplimentStore
from services.content import ContentService
from services.kv import MemoryKVStore


@pytest.fixture
def kv():
    return MemoryKVStore()


@pytest.fixture
def cache(kv):
    return TTLCache(kv)


@pytest.fixture
def upstream():
    """Per-host fake upstream handlers. Hosts without a handler refuse connections."""
    return {}


@pytest.fixture
def http_client(upstream):
    def handler(request: httpx.Request) -> httpx.Response:
        fake = upstream.get(request.url.host)
        if fake is None:
            raise httpx.ConnectError("connection refused", request=request)
        return fake(request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def content(cache, http_client):
    return ContentService(cache, http_client, settings)


@pytest.fixture
def test_app(kv, http_client, content):
    app = create_app()
    app.state.kv = kv
    app.state.http = http_client
    app.state.content = content
    app.state.compliments = MemoryComplimentStore()
    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app, raise_server_exceptions=False)
