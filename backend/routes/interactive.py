"""Interactive tools: decision spinner and compliment machine."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from routes.common import add_preflight, enforce_rate_limit, get_compliment_store, success
from services.compliments import random_compliment, submit_compliment
from services.spinner import spin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", dependencies=[Depends(enforce_rate_limit)])


class SpinnerRequest(BaseModel):
    choices: list[Any]


class ComplimentRequest(BaseModel):
    message: str | None = None
    sender: str | None = None


@router.post("/spinner")
async def spinner(body: SpinnerRequest) -> dict:
    return success(spin(body.choices))


@router.post("/compliment")
async def send_compliment(body: ComplimentRequest, store=Depends(get_compliment_store)) -> dict:
    result = await submit_compliment(store, body.message, body.sender)
    if result["needsModeration"]:
        logger.info("Compliment %s held for moderation", result["complimentId"])
    return success(result)


@router.get("/compliment")
async def get_compliment(store=Depends(get_compliment_store)) -> dict:
    return success(await random_compliment(store))


add_preflight("/spinner")
add_preflight("/compliment")
