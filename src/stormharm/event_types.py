"""Collapse free-text EVTYPE labels into a small set of categories.

The raw EVTYPE column has close to a thousand distinct spellings
("TSTM WIND", "THUNDERSTORM WINDS", "HAIL 1.75)", "Heavy snow shower"...).
Each label is case-folded and searched for trigger substrings in a fixed
order; the first trigger found decides the category.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

import pandas as pd


class EventCategory(str, Enum):
    HAIL = "hail"
    THUNDERSTORM = "thunderstorm"
    TORNADO = "tornado"
    FLOOD = "flood"
    WIND = "wind"
    LIGHTNING = "lightning"
    SNOW = "snow"
    RAIN = "rain"
    WINTER = "winter"
    OTHER = "other"


# Order matters: "hail" beats "wind" in "TSTM WIND/HAIL",
# "tstm" beats "wind" in "TSTM WIND".
EVENT_TYPE_RULES: tuple[tuple[str, EventCategory], ...] = (
    ("hail", EventCategory.HAIL),
    ("tstm", EventCategory.THUNDERSTORM),
    ("thunderstorm", EventCategory.THUNDERSTORM),
    ("tornado", EventCategory.TORNADO),
    ("flood", EventCategory.FLOOD),
    ("wind", EventCategory.WIND),
    ("lightning", EventCategory.LIGHTNING),
    ("snow", EventCategory.SNOW),
    ("rain", EventCategory.RAIN),
    ("winter", EventCategory.WINTER),
)


@lru_cache(maxsize=4096)
def _normalize_text(text: str) -> EventCategory:
    for trigger, category in EVENT_TYPE_RULES:
        if trigger in text:
            return category
    return EventCategory.OTHER


def normalize_event_type(raw_label: object) -> EventCategory:
    """Return the category for a raw EVTYPE label.

    Matching is substring containment, not word matching, so
    "THUNDERSTORM WINDS" and "TSTMW" are both thunderstorms. Labels with
    no trigger (and missing labels) are ``EventCategory.OTHER``.

    Examples:
        "TSTM WIND"      → thunderstorm
        " Hail/Wind "    → hail
        "DUST DEVIL"     → other
    """
    if raw_label is None or (not isinstance(raw_label, str) and pd.isna(raw_label)):
        return EventCategory.OTHER
    return _normalize_text(str(raw_label).strip().casefold())
