from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from ..catalog.models import Venue
from .days import SATURDAY, SUNDAY, extract_time, weekday_code
from .holidays import HOLIDAY_SERVICE_TIMES, holiday_for

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_TIME = time(10, 0)
VIGIL_MASS_TIME = time(17, 0)
VIGIL_CATEGORY = "Catholic"


def _at(reference: datetime, at: time) -> datetime:
    return reference.replace(hour=at.hour, minute=at.minute, second=0, microsecond=0)


def next_sunday(reference: datetime) -> datetime:
    """The coming Sunday; a Sunday reference moves a full week ahead."""
    days_ahead = (SUNDAY - weekday_code(reference)) % 7
    if days_ahead == 0:
        days_ahead = 7
    return reference + timedelta(days=days_ahead)


class ServiceTimePredictor:
    """Predicts the next concrete service instant for a venue.

    Holidays override everything else, then the Saturday vigil Mass for
    Catholic venues, then the venue's regular Sunday service.
    """

    def predict_next(self, venue: Venue, reference: datetime) -> datetime | None:
        """Return the next service instant, or None when it cannot be inferred."""
        holiday = holiday_for(reference.date())
        if holiday is not None:
            return _at(reference, HOLIDAY_SERVICE_TIMES[holiday])

        if venue.category == VIGIL_CATEGORY and weekday_code(reference) == SATURDAY:
            return _at(reference, VIGIL_MASS_TIME)

        if not venue.schedule.strip():
            return None

        service_time = extract_time(venue.schedule)
        if service_time is None:
            logger.debug(
                "No time found in schedule %r for venue %s, using %s",
                venue.schedule, venue.id, DEFAULT_SERVICE_TIME,
            )
            at = DEFAULT_SERVICE_TIME
        else:
            at = time(*service_time)
        return _at(next_sunday(reference), at)

    def predict_next_or_default(self, venue: Venue, reference: datetime) -> datetime:
        predicted = self.predict_next(venue, reference)
        if predicted is None:
            return _at(next_sunday(reference), DEFAULT_SERVICE_TIME)
        return predicted
