from __future__ import annotations

from typing import Sequence

from ..catalog.models import Venue
from ..journal.models import UserPreferences, VisitRecord
from .models import Suggestion, SuggestionReason

SUGGESTION_THRESHOLD = 0.5
VERY_CLOSE_MILES = 1.0
MIN_DISTANCE_MILES = 0.1

PREFERRED_CATEGORY_WEIGHT = 0.4
HISTORY_CATEGORY_WEIGHT = 0.3
DISTANCE_WEIGHT = 0.2
DIVERSITY_BONUS = 0.1
UNKNOWN_DISTANCE_RATIO = 0.5


def history_categories(history: Sequence[VisitRecord], venues: Sequence[Venue]) -> set[str]:
    """Categories of the venues the user has a visit record for.

    Visits to venues missing from *venues* cannot be resolved and are ignored.
    """
    visited_ids = {record.venue_id for record in history}
    return {v.category for v in venues if v.id in visited_ids and v.category}


def similarity(venue: Venue, prefs: UserPreferences, seen_categories: set[str]) -> float:
    score = 0.0
    if venue.category in prefs.preferred_categories:
        score += PREFERRED_CATEGORY_WEIGHT
    if venue.category in seen_categories:
        score += HISTORY_CATEGORY_WEIGHT

    if venue.distance_from_user is None:
        ratio = UNKNOWN_DISTANCE_RATIO
    else:
        ratio = min(1.0, prefs.max_preferred_distance / max(venue.distance_from_user, MIN_DISTANCE_MILES))
    score += DISTANCE_WEIGHT * ratio

    if seen_categories and venue.category not in seen_categories:
        score += DIVERSITY_BONUS
    return min(score, 1.0)


def suggestion_reason(venue: Venue, prefs: UserPreferences) -> tuple[SuggestionReason, str]:
    distance = venue.distance_from_user
    if venue.category in prefs.preferred_categories:
        return SuggestionReason.preferred_category, f"Matches your {venue.category} preference"
    if distance is not None and distance < VERY_CLOSE_MILES:
        return SuggestionReason.very_close, "Very close to you"
    if distance is not None and distance <= prefs.max_preferred_distance:
        return SuggestionReason.within_distance, "Within your preferred distance"
    return SuggestionReason.exploration, "Based on your church exploration history"


class CommunityMatcher:
    """Suggests venues the user has not visited yet."""

    def suggest(
        self,
        prefs: UserPreferences,
        venues: Sequence[Venue],
        history: Sequence[VisitRecord],
        limit: int = 5,
    ) -> list[Suggestion]:
        seen_categories = history_categories(history, venues)

        suggestions: list[Suggestion] = []
        for venue in venues:
            if venue.id in prefs.visited_venues:
                continue
            score = similarity(venue, prefs, seen_categories)
            if score < SUGGESTION_THRESHOLD:
                continue
            reason, message = suggestion_reason(venue, prefs)
            suggestions.append(Suggestion(
                venue=venue, score=round(score, 4), reason=reason, message=message,
            ))

        suggestions.sort(key=lambda s: s.score, reverse=True)
        return suggestions[:limit]
