from __future__ import annotations

from datetime import datetime

from ..catalog.models import Venue
from ..schedule.days import SUNDAY, extract_time, weekday_code
from ..schedule.predictor import DEFAULT_SERVICE_TIME, ServiceTimePredictor
from .models import PreferencesUpdate, UserPreferences, UserProfile, VisitRecord

# Fields a preferences edit may explicitly reset to null
_NULLABLE_FIELDS = {"typical_attendance_day", "last_notification_check"}


def _service_today(venue: Venue, now: datetime, predictor: ServiceTimePredictor) -> datetime | None:
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    predicted = predictor.predict_next(venue, start_of_day)
    if predicted is not None and predicted.date() == now.date():
        return predicted
    # predict_next looks a week ahead from a Sunday
    if weekday_code(now) == SUNDAY and venue.schedule.strip():
        hour, minute = extract_time(venue.schedule) or (
            DEFAULT_SERVICE_TIME.hour, DEFAULT_SERVICE_TIME.minute,
        )
        return start_of_day.replace(hour=hour, minute=minute)
    return None


def _was_on_time(
    venue: Venue, now: datetime, predictor: ServiceTimePredictor,
) -> bool | None:
    service_at = _service_today(venue, now, predictor)
    if service_at is None:
        return None
    return now <= service_at


def record_visit(profile: UserProfile, venue: Venue, now: datetime) -> UserProfile:
    """Record that the user viewed or attended *venue* without an arrival time."""
    updated = profile.model_copy(deep=True)
    prefs = updated.preferences
    prefs.visited_venues.add(venue.id)
    if venue.category:
        prefs.preferred_categories.add(venue.category)
    updated.history.append(VisitRecord(venue_id=venue.id, visited_at=now))
    return updated


def check_in(
    profile: UserProfile,
    venue: Venue,
    now: datetime,
    predictor: ServiceTimePredictor,
) -> UserProfile:
    """Record an arrival at *venue*.

    Besides the visit itself this learns the category preference, takes
    today as the typical attendance day and saves the venue.
    """
    updated = profile.model_copy(deep=True)
    prefs = updated.preferences
    prefs.visited_venues.add(venue.id)
    prefs.saved_venues.add(venue.id)
    if venue.category:
        prefs.preferred_categories.add(venue.category)
    prefs.typical_attendance_day = weekday_code(now)
    updated.history.append(VisitRecord(
        venue_id=venue.id,
        visited_at=now,
        arrived_at=now,
        on_time=_was_on_time(venue, now, predictor),
    ))
    return updated


def toggle_saved(profile: UserProfile, venue_id: str) -> UserProfile:
    updated = profile.model_copy(deep=True)
    saved = updated.preferences.saved_venues
    if venue_id in saved:
        saved.discard(venue_id)
    else:
        saved.add(venue_id)
    return updated


def update_preferences(profile: UserProfile, changes: PreferencesUpdate) -> UserProfile:
    updated = profile.model_copy(deep=True)
    fields = {
        name: value
        for name, value in changes.model_dump(exclude_unset=True).items()
        if value is not None or name in _NULLABLE_FIELDS
    }
    updated.preferences = UserPreferences.model_validate(
        {**updated.preferences.model_dump(), **fields}
    )
    return updated
