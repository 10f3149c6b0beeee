from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Sequence

from ..catalog.models import Venue
from ..journal.models import UserPreferences, VisitRecord
from .models import Accent, Insight, InsightKind

EXPLORATION_CHAMPION = 20
EXPLORATION_EXPLORER = 10
EXPLORATION_DISCOVERING = 5

CONSISTENCY_WINDOW = timedelta(days=60)
CONSISTENCY_MIN_VISITS = 4

ENGAGEMENT_BUILDER = 5
ENGAGEMENT_CONNECTED = 3

RECENT_WINDOW = timedelta(days=7)
RECENT_MIN_VISITS = 2


def exploration_insight(prefs: UserPreferences) -> Insight | None:
    count = len(prefs.visited_venues)
    if count >= EXPLORATION_CHAMPION:
        return Insight(
            kind=InsightKind.milestone,
            title="Church Explorer Champion",
            description=(
                f"You've visited {count} different churches! "
                "Your openness to exploration is inspiring."
            ),
            accent=Accent.purple,
            icon="star.fill",
        )
    if count >= EXPLORATION_EXPLORER:
        return Insight(
            kind=InsightKind.milestone,
            title="Community Explorer",
            description=f"You've explored {count} churches in your faith journey.",
            accent=Accent.blue,
            icon="map.fill",
        )
    if count >= EXPLORATION_DISCOVERING:
        return Insight(
            kind=InsightKind.encouragement,
            title="Discovering Community",
            description=f"{count} churches visited. Keep exploring!",
            accent=Accent.cyan,
            icon="sparkles",
        )
    return None


def consistency_insight(
    history: Sequence[VisitRecord], saved_venues: Sequence[Venue], now: datetime,
) -> Insight | None:
    cutoff = now - CONSISTENCY_WINDOW
    counts = Counter(r.venue_id for r in history if r.visited_at > cutoff)
    if not counts:
        return None
    venue_id, visits = counts.most_common(1)[0]
    if visits < CONSISTENCY_MIN_VISITS:
        return None
    venue = next((v for v in saved_venues if v.id == venue_id), None)
    if venue is None:
        return None
    return Insight(
        kind=InsightKind.encouragement,
        title="Growing Roots",
        description=(
            f"You've been regularly attending {venue.name}. "
            "Consistency builds community!"
        ),
        accent=Accent.green,
        icon="heart.fill",
    )


def engagement_insight(saved_venues: Sequence[Venue]) -> Insight | None:
    count = len(saved_venues)
    if count >= ENGAGEMENT_BUILDER:
        return Insight(
            kind=InsightKind.milestone,
            title="Community Builder",
            description=(
                f"You've saved {count} churches. "
                "Building connections across communities!"
            ),
            accent=Accent.orange,
            icon="bookmark.fill",
        )
    if count >= ENGAGEMENT_CONNECTED:
        return Insight(
            kind=InsightKind.encouragement,
            title="Staying Connected",
            description=f"{count} churches in your community network.",
            accent=Accent.pink,
            icon="hand.raised.fill",
        )
    return None


def recent_activity_insight(history: Sequence[VisitRecord], now: datetime) -> Insight | None:
    cutoff = now - RECENT_WINDOW
    recent = sum(1 for r in history if r.visited_at > cutoff)
    if recent < RECENT_MIN_VISITS:
        return None
    return Insight(
        kind=InsightKind.encouragement,
        title="Active This Week",
        description=f"You've checked in {recent} times this week. Stay engaged!",
        accent=Accent.indigo,
        icon="calendar",
    )


class InsightsGenerator:
    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self.clock = clock

    def generate(
        self,
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
        saved_venues: Sequence[Venue],
    ) -> list[Insight]:
        now = self.clock()
        candidates = [
            exploration_insight(prefs),
            consistency_insight(history, saved_venues, now),
            engagement_insight(saved_venues),
            recent_activity_insight(history, now),
        ]
        return [insight for insight in candidates if insight is not None]
