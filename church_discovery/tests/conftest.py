from __future__ import annotations

from datetime import datetime

import pytest

from church_discovery.catalog.models import Venue


def make_venue(
    venue_id: str = "v1",
    *,
    category: str = "Baptist",
    schedule: str = "Sunday 10:00 AM",
    distance: float | None = None,
    name: str | None = None,
    latitude: float = 36.16,
    longitude: float = -86.78,
) -> Venue:
    return Venue(
        id=venue_id,
        name=name or f"Church {venue_id}",
        category=category,
        address="1 Main St",
        latitude=latitude,
        longitude=longitude,
        schedule=schedule,
        phone="(615) 555-0100",
        distance_from_user=distance,
    )


class FixedClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def venue_factory():
    return make_venue


@pytest.fixture
def monday_clock() -> FixedClock:
    # Monday 19 October 2026, 09:00
    return FixedClock(datetime(2026, 10, 19, 9, 0))
