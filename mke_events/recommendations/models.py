from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

EVENT_COLUMNS = [
    "event_id",
    "event_name",
    "genre",
    "venue_name",
    "date",
    "latitude",
    "longitude",
    "description",
    "ticket_price",
]

HISTORY_COLUMNS = ["user_id", "event_id", "genre", "latitude", "longitude"]


class UserHistoryEntry(BaseModel):
    user_id: str
    event_id: str
    genre: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class EventCandidate(BaseModel):
    event_id: str
    event_name: str | None = None
    genre: str | None = None
    venue_name: str | None = None
    date: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    description: str | None = None
    ticket_price: str | None = None


class ScoredRecommendation(EventCandidate):
    similarity_score: float = Field(..., ge=0.0, le=1.0)


class RecommendationFilters(BaseModel):
    region: str | None = Field(
        default=None, description="Case-insensitive substring of the venue name"
    )
    genres: list[str] = Field(default_factory=list)
    upcoming_only: bool = False
    interleave: bool = False


class DateRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    to: str


class RecommendationResult(BaseModel):
    date_range: DateRange
    recommendations: list[ScoredRecommendation]
    total_candidates: int = 0
    message: str | None = None


class RecommendResponse(BaseModel):
    user: str
    date_range: DateRange
    recommendations: list[ScoredRecommendation]
    message: str | None = None


class ErrorResponse(BaseModel):
    error: str


class MetadataResponse(BaseModel):
    genres: list[str]
    venues: list[str]
