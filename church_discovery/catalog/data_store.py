from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd

from .models import Coordinate, Venue

logger = logging.getLogger(__name__)

EARTH_RADIUS_MILES = 3958.8

CATALOG_COLUMNS = [
    "id",
    "name",
    "category",
    "address",
    "latitude",
    "longitude",
    "schedule",
    "phone",
    "website",
]


def _clean_text(value) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def load_venues(path: Path) -> list[Venue]:
    """Read the venue catalog CSV into Venue records.

    Rows without usable coordinates are skipped.
    """
    df = pd.read_csv(path, dtype={"id": str, "phone": str})
    for column in CATALOG_COLUMNS:
        if column not in df.columns:
            df[column] = pd.NA

    df["latitude"] = pd.to_numeric(df["latitude"], errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")

    missing = df["latitude"].isna() | df["longitude"].isna() | df["id"].isna()
    if missing.any():
        logger.warning(
            "Skipping %d catalog rows without id or coordinates in %s",
            int(missing.sum()),
            path,
        )
    df = df.loc[~missing]

    venues: list[Venue] = []
    for _, row in df.iterrows():
        website = _clean_text(row["website"])
        venues.append(Venue(
            id=_clean_text(row["id"]),
            name=_clean_text(row["name"]),
            category=_clean_text(row["category"]),
            address=_clean_text(row["address"]),
            latitude=float(row["latitude"]),
            longitude=float(row["longitude"]),
            schedule=_clean_text(row["schedule"]),
            phone=_clean_text(row["phone"]),
            website=website or None,
        ))
    return venues


def calculate_distances(origin: Coordinate, venues: Sequence[Venue]) -> list[float]:
    """Great-circle distance in miles from *origin* to each venue."""
    if not venues:
        return []
    lat_arr = np.radians(np.array([v.latitude for v in venues], dtype=float))
    lon_arr = np.radians(np.array([v.longitude for v in venues], dtype=float))
    origin_lat = np.radians(origin.latitude)
    origin_lon = np.radians(origin.longitude)

    dlat = lat_arr - origin_lat
    dlon = lon_arr - origin_lon
    a = np.sin(dlat / 2) ** 2 + np.cos(origin_lat) * np.cos(lat_arr) * np.sin(dlon / 2) ** 2
    c = 2 * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))
    return [float(d) for d in EARTH_RADIUS_MILES * c]


def distance_between(origin: Coordinate, venue: Venue) -> float:
    return calculate_distances(origin, [venue])[0]


def with_distances(venues: Sequence[Venue], origin: Coordinate | None) -> list[Venue]:
    """Return copies of *venues* with ``distance_from_user`` set for *origin*.

    The input records are left untouched. Without an origin the derived
    distance is cleared.
    """
    if origin is None:
        return [v.model_copy(update={"distance_from_user": None}) for v in venues]
    distances = calculate_distances(origin, venues)
    return [
        v.model_copy(update={"distance_from_user": d})
        for v, d in zip(venues, distances)
    ]


class VenueCatalog:
    """In-memory venue catalog, loaded lazily from CSV on first access."""

    def __init__(self, path: Path | None = None, venues: Sequence[Venue] | None = None) -> None:
        self._path = path
        self._venues: list[Venue] | None = list(venues) if venues is not None else None

    def all(self) -> list[Venue]:
        if self._venues is None:
            if self._path is None or not self._path.exists():
                logger.warning("Venue catalog %s not found, starting empty", self._path)
                self._venues = []
            else:
                self._venues = load_venues(self._path)
        return list(self._venues)

    def get(self, venue_id: str) -> Venue | None:
        for venue in self.all():
            if venue.id == venue_id:
                return venue
        return None

    def replace(self, venues: Sequence[Venue]) -> None:
        self._venues = list(venues)
