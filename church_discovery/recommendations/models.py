from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ..catalog.filters import QuickFilter, SortMode
from ..catalog.models import Coordinate, Venue


class ScoredVenue(BaseModel):
    venue: Venue
    score: float = Field(..., ge=0.0, le=10.0)

    # Pre-weight factor values, each on a 0-10 scale
    proximity: float = 0.0
    category: float = 0.0
    familiarity: float = 0.0
    schedule_day: float = 0.0
    distance_budget: float = 0.0


class SuggestionReason(str, Enum):
    preferred_category = "preferred_category"
    very_close = "very_close"
    within_distance = "within_distance"
    exploration = "exploration"


class Suggestion(BaseModel):
    venue: Venue
    score: float = Field(..., ge=0.0, le=1.0)
    reason: SuggestionReason
    message: str


class RecommendationRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    location: Coordinate | None = None
    limit: int | None = Field(default=None, ge=1, le=50)
    sort: SortMode = SortMode.smart_match
    quick_filter: QuickFilter | None = None


class RecommendationResponse(BaseModel):
    recommendations: list[ScoredVenue]
    total_candidates: int


class SuggestionRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    location: Coordinate | None = None
    limit: int | None = Field(default=None, ge=1, le=20)


class SuggestionResponse(BaseModel):
    suggestions: list[Suggestion]
