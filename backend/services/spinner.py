"""Decision spinner: pick one of a handful of user-supplied choices."""

import random

from errors import ValidationError

MIN_CHOICES = 2
MAX_CHOICES = 5


def normalize_choices(choices: list) -> list[str]:
    """Trim, drop blanks and non-strings, de-duplicate keeping first occurrences."""
    seen: dict[str, None] = {}
    for choice in choices:
        if not isinstance(choice, str):
            continue
        trimmed = choice.strip()
        if trimmed:
            seen.setdefault(trimmed, None)
    return list(seen)


def spin(choices: list) -> dict:
    unique = normalize_choices(choices)
    if not MIN_CHOICES <= len(unique) <= MAX_CHOICES:
        raise ValidationError(
            f"Between {MIN_CHOICES} and {MAX_CHOICES} distinct non-empty choices are required, "
            f"got {len(unique)}"
        )

    selected_index = random.randrange(len(unique))
    return {
        "selectedChoice": unique[selected_index],
        "selectedIndex": selected_index,
        "choices": unique,
        # Animation hints for the UI: 1.2-2s, 3-5 full turns.
        "spinDuration": random.uniform(1200, 2000),
        "rotations": random.uniform(3, 5),
    }
