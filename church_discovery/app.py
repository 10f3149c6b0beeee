from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from .catalog.data_store import VenueCatalog, with_distances
from .catalog.filters import SortMode, apply_quick_filter, sort_venues
from .catalog.models import Coordinate, Venue
from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .errors import PreferenceStoreError, VenueNotFoundError
from .insights.generator import InsightsGenerator
from .insights.models import Insight
from .journal.actions import check_in, record_visit, toggle_saved, update_preferences
from .journal.models import PreferencesUpdate, UserPreferences, UserProfile
from .journal.store import InMemoryPreferenceStore, JsonPreferenceStore, PreferenceStore
from .recommendations.community import CommunityMatcher
from .recommendations.models import (
    RecommendationRequest,
    RecommendationResponse,
    SuggestionRequest,
    SuggestionResponse,
)
from .recommendations.scoring import ScoringEngine
from .reminders.dispatcher import InMemoryDispatcher, Notification, NotificationDispatcher
from .reminders.scheduler import ReminderScheduler
from .schedule.predictor import ServiceTimePredictor

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Engine services, constructed once and shared by every request."""

    catalog: VenueCatalog
    store: PreferenceStore
    dispatcher: NotificationDispatcher
    clock: Callable[[], datetime] = datetime.now
    config: EngineConfig = DEFAULT_ENGINE_CONFIG
    scoring: ScoringEngine = field(default_factory=ScoringEngine)
    matcher: CommunityMatcher = field(default_factory=CommunityMatcher)
    predictor: ServiceTimePredictor = field(default_factory=ServiceTimePredictor)

    def __post_init__(self) -> None:
        self.reminders = ReminderScheduler(self.predictor, self.dispatcher, self.clock)
        self.insights = InsightsGenerator(self.clock)

    def venue(self, venue_id: str) -> Venue:
        venue = self.catalog.get(venue_id)
        if venue is None:
            raise VenueNotFoundError(venue_id)
        return venue


def build_services(config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> Services:
    store: PreferenceStore
    if config.preferences_dir is not None:
        store = JsonPreferenceStore(config.preferences_dir)
    else:
        store = InMemoryPreferenceStore()
    return Services(
        catalog=VenueCatalog(config.catalog_path),
        store=store,
        dispatcher=InMemoryDispatcher(),
        config=config,
    )


_services: Services | None = None


def get_services() -> Services:
    global _services
    if _services is None:
        _services = build_services()
    return _services


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=DEFAULT_ENGINE_CONFIG.log_level)
    logger.info("Church Discovery API starting")
    yield


app = FastAPI(title="Church Discovery API", version="1.0.0", lifespan=lifespan)


def _venue_or_404(services: Services, venue_id: str) -> Venue:
    try:
        return services.venue(venue_id)
    except VenueNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


def _load_profile(services: Services, user_id: str) -> UserProfile:
    try:
        return services.store.load(user_id)
    except PreferenceStoreError:
        logger.warning("Preferences for %s unreadable", user_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Stored preferences are unreadable") from None


class VenueEvent(BaseModel):
    venue_id: str = Field(..., min_length=1)


class ReminderRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    venue_id: str = Field(..., min_length=1)
    location: Coordinate | None = None


class ReminderResponse(BaseModel):
    scheduled: bool
    notification: Notification | None = None


class NextServiceResponse(BaseModel):
    venue_id: str
    next_service: datetime
    predicted: bool


# ── Catalog endpoints ────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/venues", response_model=list[Venue])
def list_venues(
    sort: SortMode = SortMode.smart_match,
    lat: float | None = Query(default=None, ge=-90.0, le=90.0),
    lon: float | None = Query(default=None, ge=-180.0, le=180.0),
    services: Services = Depends(get_services),
) -> list[Venue]:
    origin = Coordinate(latitude=lat, longitude=lon) if lat is not None and lon is not None else None
    return sort_venues(with_distances(services.catalog.all(), origin), sort)


@app.get("/venues/{venue_id}/next-service", response_model=NextServiceResponse)
def next_service(venue_id: str, services: Services = Depends(get_services)) -> NextServiceResponse:
    venue = _venue_or_404(services, venue_id)
    now = services.clock()
    predicted = services.predictor.predict_next(venue, now)
    if predicted is None:
        return NextServiceResponse(
            venue_id=venue.id,
            next_service=services.predictor.predict_next_or_default(venue, now),
            predicted=False,
        )
    return NextServiceResponse(venue_id=venue.id, next_service=predicted, predicted=True)


# ── Discovery endpoints ──────────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    services: Services = Depends(get_services),
) -> RecommendationResponse:
    profile = _load_profile(services, body.user_id)
    prefs, history = profile.preferences, profile.history
    limit = body.limit or services.config.default_rank_limit

    venues = with_distances(services.catalog.all(), body.location)
    if body.quick_filter is not None:
        venues = apply_quick_filter(venues, body.quick_filter, prefs, services.clock().date())

    if body.sort == SortMode.smart_match:
        ranked = services.scoring.rank(venues, prefs, history, limit)
    else:
        ranked = [
            services.scoring.score_breakdown(venue, prefs, history)
            for venue in sort_venues(venues, body.sort)[:limit]
        ]
    return RecommendationResponse(recommendations=ranked, total_candidates=len(venues))


@app.post("/suggestions", response_model=SuggestionResponse)
def suggestions(
    body: SuggestionRequest,
    services: Services = Depends(get_services),
) -> SuggestionResponse:
    profile = _load_profile(services, body.user_id)
    venues = with_distances(services.catalog.all(), body.location)
    limit = body.limit or services.config.default_suggestion_limit
    return SuggestionResponse(
        suggestions=services.matcher.suggest(profile.preferences, venues, profile.history, limit),
    )


@app.get("/users/{user_id}/insights", response_model=list[Insight])
def insights(user_id: str, services: Services = Depends(get_services)) -> list[Insight]:
    profile = _load_profile(services, user_id)
    saved = [v for v in services.catalog.all() if v.id in profile.preferences.saved_venues]
    return services.insights.generate(profile.preferences, profile.history, saved)


# ── Journal endpoints ────────────────────────────────────────────────────


@app.get("/users/{user_id}/preferences", response_model=UserPreferences)
def get_preferences(user_id: str, services: Services = Depends(get_services)) -> UserPreferences:
    return _load_profile(services, user_id).preferences


@app.patch("/users/{user_id}/preferences", response_model=UserPreferences)
def patch_preferences(
    user_id: str,
    body: PreferencesUpdate,
    services: Services = Depends(get_services),
) -> UserPreferences:
    profile = services.store.update(user_id, lambda p: update_preferences(p, body))
    return profile.preferences


@app.post("/users/{user_id}/visits", response_model=UserProfile)
def visits(
    user_id: str,
    body: VenueEvent,
    services: Services = Depends(get_services),
) -> UserProfile:
    venue = _venue_or_404(services, body.venue_id)
    now = services.clock()
    return services.store.update(user_id, lambda p: record_visit(p, venue, now))


@app.post("/users/{user_id}/check-ins", response_model=UserProfile)
def check_ins(
    user_id: str,
    body: VenueEvent,
    services: Services = Depends(get_services),
) -> UserProfile:
    venue = _venue_or_404(services, body.venue_id)
    now = services.clock()
    profile = services.store.update(
        user_id, lambda p: check_in(p, venue, now, services.predictor),
    )
    logger.info("User %s checked in to %s at %s", user_id, venue.id, now.isoformat())
    return profile


@app.post("/users/{user_id}/saved/{venue_id}", response_model=UserPreferences)
def saved(
    user_id: str,
    venue_id: str,
    services: Services = Depends(get_services),
) -> UserPreferences:
    venue = _venue_or_404(services, venue_id)
    return services.store.update(user_id, lambda p: toggle_saved(p, venue.id)).preferences


# ── Reminder endpoints ───────────────────────────────────────────────────


@app.post("/reminders", response_model=ReminderResponse)
def reminders(
    body: ReminderRequest,
    services: Services = Depends(get_services),
) -> ReminderResponse:
    venue = _venue_or_404(services, body.venue_id)
    profile = _load_profile(services, body.user_id)
    notification = services.reminders.schedule(
        venue, profile.preferences, profile.history, body.location,
    )
    return ReminderResponse(scheduled=notification is not None, notification=notification)
