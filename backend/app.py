"""FastAPI application entry point for the Quirkit API."""

import logging
import sys

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.compliments import KVComplimentStore, MemoryComplimentStore
from services.content import ContentService
from services.kv import build_store

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Quirkit API", version="1.0.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    # App-owned resources; request handlers reach them through app.state.
    app.state.kv = build_store(settings.redis_url)
    app.state.http = httpx.AsyncClient(timeout=settings.api_timeout)
    app.state.content = ContentService(TTLCache(app.state.kv), app.state.http, settings)
    if settings.redis_url:
        app.state.compliments = KVComplimentStore(app.state.kv)
    else:
        app.state.compliments = MemoryComplimentStore()

    from routes.health import router as health_router
    from routes.content import router as content_router
    from routes.interactive import router as interactive_router
    from routes.common import preflight_router

    app.include_router(health_router)
    app.include_router(content_router)
    app.include_router(interactive_router)
    app.include_router(preflight_router)

    @app.on_event("startup")
    async def _validate_config() -> None:
        missing = settings.validate()
        if missing:
            logger.warning("Optional env vars unset (static fallbacks in use): %s", ", ".join(missing))

    @app.on_event("shutdown")
    async def _close_resources() -> None:
        await app.state.http.aclose()
        await app.state.kv.aclose()

    return app


app = create_app()
