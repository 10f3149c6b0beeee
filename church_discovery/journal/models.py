from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

MAX_PREP_TIME_MINUTES = 24 * 60


class UserPreferences(BaseModel):
    preferred_categories: set[str] = Field(default_factory=set)
    typical_attendance_day: int | None = Field(
        default=None, ge=1, le=7, description="1 = Sunday ... 7 = Saturday"
    )
    max_preferred_distance: float = Field(default=10.0, ge=0.0)
    visited_venues: set[str] = Field(default_factory=set)
    saved_venues: set[str] = Field(default_factory=set)
    prep_time_minutes: int = Field(default=30, ge=0, le=MAX_PREP_TIME_MINUTES)
    last_notification_check: datetime | None = None


class VisitRecord(BaseModel):
    venue_id: str = Field(..., min_length=1)
    visited_at: datetime
    arrived_at: datetime | None = None
    on_time: bool | None = None


class UserProfile(BaseModel):
    """Everything the Preference Store keeps for one user."""

    preferences: UserPreferences = Field(default_factory=UserPreferences)
    history: list[VisitRecord] = Field(default_factory=list)


class PreferencesUpdate(BaseModel):
    preferred_categories: set[str] | None = None
    typical_attendance_day: int | None = Field(default=None, ge=1, le=7)
    max_preferred_distance: float | None = Field(default=None, ge=0.0)
    prep_time_minutes: int | None = Field(default=None, ge=0, le=MAX_PREP_TIME_MINUTES)
    last_notification_check: datetime | None = None
