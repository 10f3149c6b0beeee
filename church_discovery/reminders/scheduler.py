from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Sequence

from ..catalog.data_store import distance_between
from ..catalog.models import Coordinate, Venue
from ..journal.models import UserPreferences, VisitRecord
from ..schedule.holidays import holiday_for
from ..schedule.predictor import ServiceTimePredictor
from .dispatcher import Notification, NotificationDispatcher, NotificationKind

logger = logging.getLogger(__name__)

DEFAULT_TRAVEL_TIME = timedelta(minutes=30)
BUFFER_TIME = timedelta(minutes=15)
MILES_PER_MINUTE = 0.5  # ~30 mph city driving
TRAFFIC_FACTOR = 1.2
MAX_ADVANCE = timedelta(hours=24)
IMMINENT_LEAD = timedelta(hours=1)


@dataclass(frozen=True)
class LeadTime:
    prep: timedelta
    travel: timedelta
    buffer: timedelta

    @property
    def total(self) -> timedelta:
        return self.prep + self.travel + self.buffer


def average_prep_time(
    history: Sequence[VisitRecord], venue_id: str, prefs: UserPreferences,
) -> timedelta:
    """Preparation time before leaving for *venue_id*.

    Visits with a recorded arrival are the only candidates for a personal
    average, but they carry no preparation-start instant, so the user's
    configured prep time is used either way.
    """
    timed_visits = [
        record for record in history
        if record.venue_id == venue_id and record.arrived_at is not None
    ]
    if timed_visits:
        logger.debug(
            "%d timed visits to %s; no preparation start recorded, using preference",
            len(timed_visits), venue_id,
        )
    return timedelta(minutes=prefs.prep_time_minutes)


def estimate_travel_time(venue: Venue, user_location: Coordinate | None) -> timedelta:
    if user_location is None:
        return DEFAULT_TRAVEL_TIME
    miles = distance_between(user_location, venue)
    minutes = miles / MILES_PER_MINUTE * TRAFFIC_FACTOR
    return timedelta(minutes=minutes)


class ReminderScheduler:
    """Works out when to remind a user about a venue's next service."""

    def __init__(
        self,
        predictor: ServiceTimePredictor | None = None,
        dispatcher: NotificationDispatcher | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.predictor = predictor or ServiceTimePredictor()
        self.dispatcher = dispatcher
        self.clock = clock

    def lead_time(
        self,
        venue: Venue,
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
        user_location: Coordinate | None,
    ) -> LeadTime:
        return LeadTime(
            prep=average_prep_time(history, venue.id, prefs),
            travel=estimate_travel_time(venue, user_location),
            buffer=BUFFER_TIME,
        )

    def _reminder_for(
        self,
        service_at: datetime,
        lead: LeadTime,
        now: datetime,
    ) -> datetime:
        latest = now + MAX_ADVANCE
        try:
            reminder = service_at - lead.total
        except OverflowError:
            # lead runs past datetime.min
            reminder = service_at - IMMINENT_LEAD
        if reminder < now:
            reminder = service_at - IMMINENT_LEAD
        if reminder > latest:
            reminder = latest
        # Service is under an hour away (or already started): remind right away
        return max(reminder, now)

    def optimal_reminder(
        self,
        venue: Venue,
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
        user_location: Coordinate | None = None,
    ) -> datetime | None:
        """Return the reminder instant, or None when no service time is known."""
        now = self.clock()
        service_at = self.predictor.predict_next(venue, now)
        if service_at is None:
            return None
        lead = self.lead_time(venue, prefs, history, user_location)
        return self._reminder_for(service_at, lead, now)

    def plan(
        self,
        venue: Venue,
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
        user_location: Coordinate | None = None,
    ) -> Notification | None:
        now = self.clock()
        service_at = self.predictor.predict_next(venue, now)
        if service_at is None:
            logger.info("No service time for venue %s, no reminder planned", venue.id)
            return None
        lead = self.lead_time(venue, prefs, history, user_location)
        fire_at = self._reminder_for(service_at, lead, now)

        service_clock = service_at.strftime("%I:%M %p").lstrip("0")
        holiday = holiday_for(service_at.date())
        if holiday is not None:
            return Notification(
                fire_at=fire_at,
                venue_id=venue.id,
                title="Holiday Service",
                body=f"{venue.name} holds a special service at {service_clock}.",
                kind=NotificationKind.holiday_service,
            )
        leave_in = int(lead.total.total_seconds() // 60)
        return Notification(
            fire_at=fire_at,
            venue_id=venue.id,
            title="Get Ready for Service",
            body=(
                f"{venue.name} service begins at {service_clock}. "
                f"Allow about {leave_in} minutes to get ready and travel."
            ),
        )

    def schedule(
        self,
        venue: Venue,
        prefs: UserPreferences,
        history: Sequence[VisitRecord],
        user_location: Coordinate | None = None,
    ) -> Notification | None:
        """Plan the reminder and hand it to the dispatcher."""
        notification = self.plan(venue, prefs, history, user_location)
        if notification is not None and self.dispatcher is not None:
            self.dispatcher.dispatch(notification)
        return notification
