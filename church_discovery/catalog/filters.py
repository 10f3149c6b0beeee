from __future__ import annotations

import math
from datetime import date
from enum import Enum
from typing import Sequence

from ..journal.models import UserPreferences
from ..schedule.days import DAY_NAMES, SUNDAY, weekday_code
from .models import Venue

NEAREST_NOW_COUNT = 5


class SortMode(str, Enum):
    smart_match = "smart_match"
    nearest = "nearest"
    farthest = "farthest"
    alphabetical = "alphabetical"


class QuickFilter(str, Enum):
    nearest_now = "nearest_now"
    service_today = "service_today"
    visited_before = "visited_before"
    saved = "saved"


def _distance_key(venue: Venue) -> float:
    return math.inf if venue.distance_from_user is None else venue.distance_from_user


def sort_venues(venues: Sequence[Venue], mode: SortMode) -> list[Venue]:
    """Order venues for display.

    ``smart_match`` keeps the given order (the caller ranks by score).
    Venues without a known distance sort last for both distance modes.
    """
    if mode == SortMode.nearest:
        return sorted(venues, key=_distance_key)
    if mode == SortMode.farthest:
        known = [v for v in venues if v.distance_from_user is not None]
        unknown = [v for v in venues if v.distance_from_user is None]
        return sorted(known, key=_distance_key, reverse=True) + unknown
    if mode == SortMode.alphabetical:
        return sorted(venues, key=lambda v: v.name.casefold())
    return list(venues)


def apply_quick_filter(
    venues: Sequence[Venue],
    quick_filter: QuickFilter,
    prefs: UserPreferences,
    today: date,
) -> list[Venue]:
    if quick_filter == QuickFilter.nearest_now:
        known = [v for v in venues if v.distance_from_user is not None]
        return sorted(known, key=_distance_key)[:NEAREST_NOW_COUNT]
    if quick_filter == QuickFilter.service_today:
        code = weekday_code(today)
        if code == SUNDAY:
            return list(venues)
        day_name = DAY_NAMES[code]
        return [v for v in venues if day_name in v.schedule.lower()]
    if quick_filter == QuickFilter.visited_before:
        return [v for v in venues if v.id in prefs.visited_venues]
    if quick_filter == QuickFilter.saved:
        return [v for v in venues if v.id in prefs.saved_venues]
    return list(venues)
