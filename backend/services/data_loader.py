"""Static fallback data bundled with the service.

Loaded once at import. Each ``*_pool`` helper returns a tuple of ready-to-serve
payloads tagged ``source: "fallback"``; callers pick from it at random.
"""

import json
from datetime import date
from pathlib import Path

DATA_DIR = Path(__file__).parent / "data"


def _load(name: str) -> tuple:
    with open(DATA_DIR / name, encoding="utf-8") as f:
        return tuple(json.load(f))


EXCUSES = _load("excuses.json")
JOKES = _load("jokes.json")
QUOTES = _load("quotes.json")
SHOWER_THOUGHTS = _load("showerthoughts.json")
HOLIDAYS = _load("holidays.json")
DRINKS = _load("drinks.json")
TIMER_BREAKS = _load("timer-breaks.json")
COMPLIMENTS = _load("compliments.json")

NO_HOLIDAY_DESCRIPTION = "welp unlucky, how about we do some work aye!!!"


def excuse_pool() -> tuple[dict, ...]:
    return tuple({"excuse": e, "source": "fallback"} for e in EXCUSES)


def joke_pool() -> tuple[dict, ...]:
    return tuple({"joke": j["joke"], "type": j["type"], "source": "fallback"} for j in JOKES)


def quote_pool(target_date: str) -> tuple[dict, ...]:
    return tuple(
        {"quote": q["quote"], "author": q["author"], "date": target_date, "source": "fallback"}
        for q in QUOTES
    )


def shower_thought_pool() -> tuple[dict, ...]:
    return tuple({"thought": t, "source": "fallback"} for t in SHOWER_THOUGHTS)


def holiday_pool(target_date: str) -> tuple[dict, ...]:
    """Holidays falling on the same month and day as ``target_date``.

    Years are ignored since the bundled holidays recur annually. With no match
    the pool holds a single "no holiday" placeholder.
    """
    target = date.fromisoformat(target_date)
    matches = []
    for holiday in HOLIDAYS:
        day = date.fromisoformat(holiday["date"])
        if (day.month, day.day) == (target.month, target.day):
            matches.append(
                {
                    "name": holiday["name"],
                    "description": holiday["description"],
                    "date": target_date,
                    "source": "fallback",
                }
            )
    if matches:
        return tuple(matches)
    return (
        {
            "name": "No Special Holiday Today",
            "description": NO_HOLIDAY_DESCRIPTION,
            "date": target_date,
            "source": "fallback",
        },
    )


def drink_pool() -> tuple[dict, ...]:
    return tuple(
        {
            "name": d["name"],
            "ingredients": list(d["ingredients"]),
            "instructions": list(d["instructions"]),
            "source": "fallback",
        }
        for d in DRINKS
    )


def timer_break_pool(break_type: str | None = None) -> tuple[dict, ...]:
    breaks = [b for b in TIMER_BREAKS if break_type is None or b["type"] == break_type]
    return tuple(
        {"breakSuggestion": b["suggestion"], "duration": b["duration"], "type": b["type"]}
        for b in breaks
    )


def compliment_pool() -> tuple[dict, ...]:
    return tuple({"message": c["message"], "sender": c["sender"]} for c in COMPLIMENTS)
