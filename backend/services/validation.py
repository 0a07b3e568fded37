"""Input validation helpers shared by the routes."""

import re
from datetime import date, datetime, timezone

from errors import ValidationError

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIMER_TYPES = ("short", "long")
MAX_TEXT_LENGTH = 1000


def validate_date(value: str | None, today: date | None = None) -> str | None:
    """Accept an optional YYYY-MM-DD date within one year of today."""
    if not value:
        return None
    if not DATE_PATTERN.match(value):
        raise ValidationError("Date must be in YYYY-MM-DD format")
    try:
        parsed = date.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value}") from e

    today = today or datetime.now(timezone.utc).date()
    if abs((parsed - today).days) > 366:
        raise ValidationError("Date must be within one year of today")
    return value


def validate_timer_type(value: str | None) -> str | None:
    if not value:
        return None
    if value not in TIMER_TYPES:
        raise ValidationError('Timer type must be either "short" or "long"')
    return value


def sanitize_text(text: str) -> str:
    """Collapse whitespace, strip angle brackets and cap the length."""
    text = re.sub(r"\s+", " ", text.strip())
    return re.sub(r"[<>]", "", text)[:MAX_TEXT_LENGTH]
