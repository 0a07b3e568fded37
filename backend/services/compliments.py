"""Compliment machine: submit anonymous compliments and receive random ones.

Compliments live in an explicitly owned ``ComplimentStore`` attached to the
app. ``KVComplimentStore`` keeps one hash per compliment and pushes its id onto
``approved_compliments`` or ``moderation_queue``; when the key-value store
misbehaves it degrades to the in-memory store it owns.
"""

import logging
import random
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from errors import ValidationError
from services import data_loader
from services.validation import sanitize_text

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 500
MAX_SENDER_LENGTH = 50

APPROVED_KEY = "approved_compliments"
MODERATION_KEY = "moderation_queue"

PROFANITY_WORDS = (
    "damn", "hell", "shit", "fuck", "bitch", "ass", "bastard", "crap",
    "piss", "dick", "cock", "pussy", "whore", "slut", "fag", "nigger",
)


def contains_profanity(text: str) -> bool:
    """Case-insensitive substring match against ``PROFANITY_WORDS``."""
    lowered = text.lower()
    return any(word in lowered for word in PROFANITY_WORDS)


@dataclass
class Compliment:
    id: str
    message: str
    sender: str
    timestamp: int
    is_moderated: bool = True
    is_approved: bool = True
    moderation_flags: list[str] = field(default_factory=list)

    def to_hash(self) -> dict[str, str]:
        return {
            "id": self.id,
            "message": self.message,
            "sender": self.sender,
            "timestamp": str(self.timestamp),
            "isModerated": str(self.is_moderated).lower(),
            "isApproved": str(self.is_approved).lower(),
            "moderationFlags": ",".join(self.moderation_flags),
        }

    @classmethod
    def from_hash(cls, raw: dict[str, str]) -> "Compliment":
        flags = raw.get("moderationFlags", "")
        return cls(
            id=raw["id"],
            message=raw["message"],
            sender=raw["sender"],
            timestamp=int(raw["timestamp"]),
            is_moderated=raw.get("isModerated") == "true",
            is_approved=raw.get("isApproved") == "true",
            moderation_flags=flags.split(",") if flags else [],
        )

    def to_public(self, source: str) -> dict:
        return {
            "message": self.message,
            "sender": self.sender,
            "timestamp": self.timestamp,
            "source": source,
        }


class MemoryComplimentStore:
    """Process-local store; owned by whoever created it, never module-global."""

    source = "memory"

    def __init__(self):
        self._items: list[Compliment] = []

    async def append(self, compliment: Compliment) -> None:
        self._items.append(compliment)

    async def filter(self, predicate: Callable[[Compliment], bool]) -> list[Compliment]:
        return [c for c in self._items if predicate(c)]

    async def random_approved(self) -> dict | None:
        approved = await self.filter(lambda c: c.is_approved)
        if not approved:
            return None
        return random.choice(approved).to_public(self.source)


class KVComplimentStore:
    source = "database"

    def __init__(self, store, attempts: int = 3, retry_wait=None):
        self._store = store
        self._memory = MemoryComplimentStore()
        self._attempts = attempts
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, max=3)

    async def append(self, compliment: Compliment) -> None:
        target = APPROVED_KEY if compliment.is_approved else MODERATION_KEY
        try:
            await self._store.hset(compliment.id, mapping=compliment.to_hash())
            await self._store.lpush(target, compliment.id)
        except Exception as e:
            logger.warning("Compliment store write failed, keeping %s in memory: %s", compliment.id, e)
            await self._memory.append(compliment)
            return
        logger.info("Stored compliment %s in %s", compliment.id, target)

    async def filter(self, predicate: Callable[[Compliment], bool]) -> list[Compliment]:
        found = []
        for key in (APPROVED_KEY, MODERATION_KEY):
            for compliment_id in await self._store.lrange(key, 0, -1):
                raw = await self._store.hgetall(compliment_id)
                if raw:
                    compliment = Compliment.from_hash(raw)
                    if predicate(compliment):
                        found.append(compliment)
        return found + await self._memory.filter(predicate)

    async def _fetch_random_approved(self) -> dict | None:
        ids = await self._store.lrange(APPROVED_KEY, 0, -1)
        if not ids:
            return None
        raw = await self._store.hgetall(random.choice(ids))
        if not raw or "message" not in raw:
            return None
        return Compliment.from_hash(raw).to_public(self.source)

    async def random_approved(self) -> dict | None:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._attempts), wait=self._retry_wait, reraise=True
            ):
                with attempt:
                    found = await self._fetch_random_approved()
        except Exception as e:
            logger.warning("Compliment store read failed after %d attempts: %s", self._attempts, e)
            found = None
        return found or await self._memory.random_approved()


def _validate(message: str, sender: str) -> None:
    errors = []
    if not message:
        errors.append("Compliment message is required")
    elif len(message) > MAX_MESSAGE_LENGTH:
        errors.append(f"Compliment message must be {MAX_MESSAGE_LENGTH} characters or less")
    if not sender:
        errors.append("Sender name is required")
    elif len(sender) > MAX_SENDER_LENGTH:
        errors.append(f"Sender name must be {MAX_SENDER_LENGTH} characters or less")
    if errors:
        raise ValidationError(", ".join(errors))


async def submit_compliment(store, message: str, sender: str) -> dict:
    """Validate and store a compliment. Profanity routes it to moderation."""
    message = (message or "").strip()
    sender = (sender or "").strip()
    _validate(message, sender)

    flagged = contains_profanity(message) or contains_profanity(sender)
    now_ms = int(time.time() * 1000)
    compliment = Compliment(
        id=f"compliment:{now_ms}:{uuid.uuid4().hex[:9]}",
        message=sanitize_text(message),
        sender=sanitize_text(sender),
        timestamp=now_ms,
        is_approved=not flagged,
        moderation_flags=["profanity"] if flagged else [],
    )
    await store.append(compliment)

    return {
        "message": "Compliment submitted for review" if flagged else "Compliment sent successfully!",
        "complimentId": compliment.id,
        "isApproved": compliment.is_approved,
        "needsModeration": flagged,
    }


async def random_compliment(store) -> dict:
    """A random approved compliment, or a bundled one when there are none."""
    found = await store.random_approved()
    if found:
        return found
    fallback = random.choice(data_loader.compliment_pool())
    return {**fallback, "timestamp": int(time.time() * 1000), "source": "fallback"}
