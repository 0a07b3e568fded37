"""Custom exceptions and centralized FastAPI error handlers.

Every failure leaves the API in the same envelope:

    {"success": false, "error": {"code": ..., "message": ..., "category": ...}}

The message is a randomly flavoured line from the error's category followed by
the technical message, so users get a laugh and developers get the detail.
"""

import logging
import random
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.routing import Match

logger = logging.getLogger(__name__)


class ErrorCategory(str, Enum):
    CHAOTIC = "chaotic"
    CHILL = "chill"
    MEME = "meme"
    SARCASTIC = "sarcastic"
    GAMING = "gaming"
    NERDY = "nerdy"
    FANTASY = "fantasy"
    SCIFI = "scifi"


QUIRKY_MESSAGES: dict[ErrorCategory, tuple[str, ...]] = {
    ErrorCategory.CHAOTIC: (
        "Oops! The chaos gremlins struck again!",
        "Well, that escalated quickly... Error code: MAYHEM",
        "The universe said 'nope' to your request!",
        "Something went sideways in the digital realm!",
        "The code decided to take a coffee break!",
    ),
    ErrorCategory.CHILL: (
        "No worries, just a small hiccup. Take a deep breath.",
        "Relax, we'll figure this out together.",
        "It's all good - just a temporary digital detour.",
        "Stay calm, this too shall pass.",
        "Take it easy, we're working on it.",
    ),
    ErrorCategory.MEME: (
        "This is fine. Everything is fine. (It's not fine)",
        "Error 404: Motivation not found",
        "Task failed successfully!",
        "One does not simply... make error-free code",
        "It's not a bug, it's a feature! (Just kidding, it's a bug)",
    ),
    ErrorCategory.SARCASTIC: (
        "Oh great, another error. How original.",
        "Well, that worked exactly as expected... said no one ever.",
        "Error detected. Shocking, I know.",
        "Oh look, something broke. What a surprise.",
        "Another day, another error. Living the dream!",
    ),
    ErrorCategory.GAMING: (
        "Achievement Unlocked: Found a Bug!",
        "Game Over! Press F to pay respects.",
        "Error encountered! You need more XP to continue.",
        "Connection to server lost. Respawning...",
        "Quest failed: Debug the application",
    ),
    ErrorCategory.NERDY: (
        "Error 42: The answer to life, universe, and everything went wrong",
        "Segmentation fault (core dumped... your hopes and dreams)",
        "Stack overflow in the space-time continuum",
        "Memory leak detected in human patience buffer",
        "Infinite loop found in error handling logic",
    ),
    ErrorCategory.FANTASY: (
        "The ancient scrolls of code have been corrupted!",
        "A wild error appeared! It's super effective!",
        "Your request was blocked by a firewall dragon.",
        "The server wizard is currently unavailable.",
        "The digital realm rejects your offering.",
    ),
    ErrorCategory.SCIFI: (
        "Error in the Matrix detected. Red pill or blue pill?",
        "Temporal paradox in the data stream!",
        "The AI has become self-aware... and buggy.",
        "Quantum entanglement error in the server farm.",
        "The mothership's communication array is down.",
    ),
}


def quirky_message(message: str, category: ErrorCategory | None = None) -> str:
    """Flavour a technical message with a random line from ``category``."""
    category = category or random.choice(list(ErrorCategory))
    return f"{random.choice(QUIRKY_MESSAGES[category])} (Error: {message})"


class QuirkitError(Exception):
    """Base exception with HTTP status code, error code and message category."""

    status_code = 500
    code = "INTERNAL_ERROR"
    category = ErrorCategory.CHAOTIC

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(QuirkitError):
    status_code = 400
    code = "VALIDATION_ERROR"
    category = ErrorCategory.SARCASTIC


class NotFoundError(QuirkitError):
    status_code = 404
    code = "NOT_FOUND"
    category = ErrorCategory.MEME

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class RateLimitExceeded(QuirkitError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    category = ErrorCategory.CHILL

    def __init__(self, message: str = "Too many requests. Please slow down!"):
        super().__init__(message)


class UpstreamTimeout(QuirkitError):
    """Raised when an upstream call does not answer in time.

    The message always contains ``timeout`` so the fallback classifier treats
    it as a connectivity failure.
    """

    status_code = 408
    code = "TIMEOUT_ERROR"
    category = ErrorCategory.GAMING

    def __init__(self, message: str = "Request timeout"):
        super().__init__(message)


class ExternalServiceError(QuirkitError):
    status_code = 503
    code = "EXTERNAL_API_ERROR"
    category = ErrorCategory.NERDY

    def __init__(self, service: str, detail: str | None = None):
        message = f"External service {service} is currently unavailable"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.service = service


class ConfigurationError(QuirkitError):
    """Programming/configuration mistake, e.g. an empty fallback pool."""


def error_from_exception(exc: Exception) -> QuirkitError:
    """Map an arbitrary exception onto the error taxonomy.

    Typed errors pass through untouched; anything else is classified by
    keywords in its message and defaults to an internal error.
    """
    if isinstance(exc, QuirkitError):
        return exc

    message = str(exc)
    if "timeout" in message:
        return UpstreamTimeout(message)
    if "not found" in message or "404" in message:
        return NotFoundError()
    if "rate limit" in message or "429" in message:
        return RateLimitExceeded()
    if "validation" in message or "invalid" in message:
        return ValidationError(message)
    return QuirkitError(message)


def error_response(
    exc: QuirkitError, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        {
            "success": False,
            "error": {
                "code": exc.code,
                "message": quirky_message(str(exc), exc.category),
                "category": exc.category.value,
            },
        },
        status_code=exc.status_code,
        headers=headers,
    )


def allowed_methods(request: Request) -> list[str]:
    """Every method served at the request path, across all matching routes."""
    methods: set[str] = set()
    for route in request.app.router.routes:
        route_methods = getattr(route, "methods", None)
        if route_methods and route.matches(request.scope)[0] is not Match.NONE:
            methods.update(route_methods)
    return sorted(methods)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(QuirkitError)
    async def handle_quirkit_error(_request: Request, exc: QuirkitError):
        logger.warning("%s (%d): %s", exc.code, exc.status_code, exc)
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
            for err in exc.errors()
        )
        return error_response(ValidationError(f"Invalid request body: {problems}"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            allowed = ", ".join(allowed_methods(request)) or (exc.headers or {}).get("Allow", "")
            return JSONResponse(
                {
                    "success": False,
                    "error": {
                        "code": "METHOD_NOT_ALLOWED",
                        "message": f"Method not allowed. Allowed methods: {allowed}",
                        "category": ErrorCategory.SARCASTIC.value,
                    },
                },
                status_code=405,
                headers={**(exc.headers or {}), "Allow": allowed},
            )
        if exc.status_code == 404:
            return error_response(NotFoundError("Route"), headers=exc.headers)
        return error_response(QuirkitError(str(exc.detail), exc.status_code), headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        mapped = error_from_exception(exc)
        if mapped.status_code >= 500:
            logger.exception("Unhandled error: %s", exc)
        else:
            logger.warning("Mapped %s to %s: %s", type(exc).__name__, mapped.code, exc)
        return error_response(mapped)
