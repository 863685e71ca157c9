"""Event title weather annotations.

Titles are annotated by appending a parenthetical weather summary:

    "Standup"  ->  "Standup (cloudy, 20°C)"
    "Standup"  ->  "Standup (weather unavailable)"

Before a new annotation is added, any earlier one is removed with
`strip_weather`, which drops every parenthesized substring and every emoji.
The two functions satisfy

    strip_weather(compose_title(clean, descriptor)) == clean

for any trimmed title without parentheses or emoji, so repeated syncs
converge on one title instead of stacking annotations.
"""

from __future__ import annotations

import re

from calendar_weather.models.weather import WeatherDescriptor, WeatherResult

UNAVAILABLE_TEXT = "weather unavailable"

PARENTHESIZED = re.compile(r"\([^)]*\)")

EMOJI = re.compile(
    "["
    "\U0001F000-\U0001FAFF"  # mahjong, cards, enclosed, flags, pictographs
    "\U000E0020-\U000E007F"  # tag sequences (subdivision flags)
    "\u231A-\u231B"  # watch, hourglass
    "\u23E9-\u23FA"  # media controls, alarm clock, stopwatch
    "\u2600-\u27BF"  # misc symbols and dingbats
    "\u2B05-\u2B07"  # arrows
    "\u2B1B-\u2B1C"  # large squares
    "\u2B50\u2B55"  # star, circle
    "\u3030\u303D\u3297\u3299"  # wavy dash, part mark, circled ideographs
    "\u20E3"  # combining keycap
    "\u200D"  # zero width joiner
    "\uFE0F"  # variation selector-16
    "]"
)


def strip_weather(title: str) -> str:
    """Remove weather annotations and emoji from a title.

    Idempotent: ``strip_weather(strip_weather(t)) == strip_weather(t)``.
    """
    clean = PARENTHESIZED.sub("", title)
    clean = EMOJI.sub("", clean)
    return clean.strip()


def format_weather(descriptor: WeatherResult) -> str:
    """Render the parenthetical annotation for a lookup result."""
    if isinstance(descriptor, WeatherDescriptor):
        return f"({descriptor.condition_text}, {descriptor.temperature_c}°C)"
    return f"({UNAVAILABLE_TEXT})"


def compose_title(clean_title: str, descriptor: WeatherResult) -> str:
    """Append the weather annotation to an already-clean title."""
    annotation = format_weather(descriptor)
    if not clean_title:
        return annotation
    return f"{clean_title} {annotation}"


def annotate(title: str, descriptor: WeatherResult) -> str:
    """Replace any existing annotation on ``title`` with a fresh one."""
    return compose_title(strip_weather(title), descriptor)
