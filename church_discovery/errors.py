from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for errors raised by the discovery engine."""


class VenueNotFoundError(DiscoveryError, LookupError):
    def __init__(self, venue_id: str) -> None:
        super().__init__(f"Unknown venue: {venue_id}")
        self.venue_id = venue_id


class PreferenceStoreError(DiscoveryError):
    """Persisted preferences could not be read back."""
