from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Sequence

from ..catalog.models import Venue
from ..journal.models import UserPreferences, VisitRecord
from ..schedule.days import schedule_mentions_day
from .models import ScoredVenue

WEIGHTS: dict[str, float] = {
    "proximity": 0.30,
    "category": 0.25,
    "familiarity": 0.20,
    "schedule_day": 0.15,
    "distance_budget": 0.10,
}

MAX_SCORE = 10.0
PROXIMITY_RANGE_MILES = 25.0
DISTANCE_BUDGET_BAND_MILES = 5.0
FAMILIARITY_CAP = 8.0
FAMILIARITY_PER_VISIT = 2.0

# Factor values used when the input carries no signal either way
NEUTRAL_PROXIMITY = 5.0
PREFERRED_CATEGORY = 7.5
OTHER_CATEGORY = 2.0
NEUTRAL_CATEGORY = 5.0
DAY_MATCH = 6.0
DAY_MISMATCH = 2.0
NEUTRAL_DAY = 4.0
WITHIN_BUDGET = 5.0


def visit_counts(history: Iterable[VisitRecord]) -> Counter[str]:
    return Counter(record.venue_id for record in history)


def _proximity(distance: float | None) -> float:
    if distance is None:
        return NEUTRAL_PROXIMITY
    return max(0.0, (PROXIMITY_RANGE_MILES - distance) / PROXIMITY_RANGE_MILES * 10.0)


def _category(category: str, prefs: UserPreferences) -> float:
    if category in prefs.preferred_categories:
        return PREFERRED_CATEGORY
    if prefs.preferred_categories:
        return OTHER_CATEGORY
    return NEUTRAL_CATEGORY


def _familiarity(visit_count: int) -> float:
    if visit_count <= 0:
        return 0.0
    return min(FAMILIARITY_CAP, visit_count * FAMILIARITY_PER_VISIT)


def _schedule_day(schedule: str, prefs: UserPreferences) -> float:
    if prefs.typical_attendance_day is None:
        return NEUTRAL_DAY
    if schedule_mentions_day(schedule, prefs.typical_attendance_day):
        return DAY_MATCH
    return DAY_MISMATCH


def _distance_budget(distance: float | None, prefs: UserPreferences) -> float:
    if distance is None or distance <= prefs.max_preferred_distance:
        return WITHIN_BUDGET
    excess = distance - prefs.max_preferred_distance
    return max(0.0, WITHIN_BUDGET * (1.0 - excess / DISTANCE_BUDGET_BAND_MILES))


class ScoringEngine:
    """Ranks venues by a weighted sum of five factors on a 0-10 scale.

    Pure over its inputs: nothing passed in is modified, so a single engine
    can serve concurrent callers.
    """

    def __init__(self, weights: dict[str, float] | None = None) -> None:
        self.weights = dict(weights or WEIGHTS)
        if set(self.weights) != set(WEIGHTS):
            raise ValueError(f"Weights must cover exactly {sorted(WEIGHTS)}")
        if not math.isclose(sum(self.weights.values()), 1.0):
            raise ValueError(f"Weights sum to {sum(self.weights.values())}, expected 1.0")

    def _breakdown(
        self, venue: Venue, prefs: UserPreferences, counts: Counter[str],
    ) -> ScoredVenue:
        distance = venue.distance_from_user
        factors = {
            "proximity": _proximity(distance),
            "category": _category(venue.category, prefs),
            "familiarity": _familiarity(
                counts.get(venue.id, 0) if venue.id in prefs.visited_venues else 0
            ),
            "schedule_day": _schedule_day(venue.schedule, prefs),
            "distance_budget": _distance_budget(distance, prefs),
        }
        total = sum(self.weights[name] * value for name, value in factors.items())
        if math.isnan(total):
            total = 0.0
        return ScoredVenue(
            venue=venue,
            score=min(MAX_SCORE, max(0.0, total)),
            **factors,
        )

    def score_breakdown(
        self,
        venue: Venue,
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
    ) -> ScoredVenue:
        return self._breakdown(venue, prefs, visit_counts(history))

    def score(
        self,
        venue: Venue,
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
    ) -> float:
        return self.score_breakdown(venue, prefs, history).score

    def rank(
        self,
        venues: Sequence[Venue],
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
        limit: int | None = 10,
    ) -> list[ScoredVenue]:
        """Score every candidate and return the best first.

        Python's sort is stable, so equal scores keep catalog order.
        """
        counts = visit_counts(history)
        scored = [self._breakdown(venue, prefs, counts) for venue in venues]
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored if limit is None else scored[:limit]
