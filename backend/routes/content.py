"""Content routes: one thin GET per fun tool.

Each handler delegates to ContentService, which falls back to bundled data
when the upstream API is unreachable, so these routes rarely fail.
"""

from fastapi import APIRouter, Depends, Query

from routes.common import add_preflight, enforce_rate_limit, get_content_service, success
from services.content import ContentService
from services.validation import validate_date, validate_timer_type

router = APIRouter(prefix="/api", dependencies=[Depends(enforce_rate_limit)])


@router.get("/excuse")
async def excuse(content: ContentService = Depends(get_content_service)) -> dict:
    return success(await content.get_excuse())


@router.get("/joke")
async def joke(content: ContentService = Depends(get_content_service)) -> dict:
    return success(await content.get_joke())


@router.get("/quote")
async def quote(
    date: str | None = Query(None),
    content: ContentService = Depends(get_content_service),
) -> dict:
    """Quote of the day for ``date`` (YYYY-MM-DD, default today in UTC)."""
    return success(await content.get_quote(validate_date(date)))


@router.get("/showerthought")
async def shower_thought(content: ContentService = Depends(get_content_service)) -> dict:
    return success(await content.get_shower_thought())


@router.get("/holiday")
async def holiday(
    date: str | None = Query(None),
    content: ContentService = Depends(get_content_service),
) -> dict:
    return success(await content.get_holiday(validate_date(date)))


@router.get("/drink")
async def drink(content: ContentService = Depends(get_content_service)) -> dict:
    return success(await content.get_drink())


@router.get("/timer")
async def timer(
    type: str | None = Query(None),
    content: ContentService = Depends(get_content_service),
) -> dict:
    """Break suggestion for the productivity timer (``short`` or ``long``)."""
    return success(await content.get_timer_break(validate_timer_type(type)))


for _path in ("/excuse", "/joke", "/quote", "/showerthought", "/holiday", "/drink", "/timer"):
    add_preflight(_path)
