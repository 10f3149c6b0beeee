from __future__ import annotations

from pydantic import BaseModel, Field


class Coordinate(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class Venue(BaseModel):
    id: str = Field(..., min_length=1)
    name: str
    category: str = Field(default="", description="Denomination label, e.g. Catholic")
    address: str = ""
    latitude: float
    longitude: float
    schedule: str = Field(default="", description='Free text, e.g. "Sunday 10:00 AM"')
    phone: str = ""
    website: str | None = None
    distance_from_user: float | None = Field(
        default=None,
        ge=0.0,
        description="Miles from the user; None when the user location is unknown",
    )

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)
