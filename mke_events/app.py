from __future__ import annotations

import logging

import pandas as pd
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

from . import __version__
from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .logging_config import setup_logging
from .recommendations.config import DEFAULT_RECOMMENDATION_CONFIG
from .recommendations.data_store import get_catalog, to_records
from .recommendations.errors import DataStoreError
from .recommendations.models import (
    ErrorResponse,
    EventCandidate,
    MetadataResponse,
    RecommendationFilters,
    RecommendResponse,
)
from .recommendations.retrieval import parse_event_date, recommend

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Milwaukee Event Recommendation API", version=__version__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@app.exception_handler(DataStoreError)
async def data_store_error_handler(request: Request, exc: DataStoreError) -> JSONResponse:
    logger.error("Data store failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def _split_genres(values: list[str] | None) -> list[str]:
    """Flatten repeated ``genres`` params and split each on commas."""
    genres: list[str] = []
    for value in values or []:
        for g in value.split(","):
            g = g.strip()
            if g:
                genres.append(g)
    return genres


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata", response_model=MetadataResponse)
def metadata() -> MetadataResponse:
    df = get_catalog().get_all_events()
    genres = sorted({g.strip() for g in df["genre"].dropna() if g.strip()})
    venues = sorted({v.strip() for v in df["venue_name"].dropna() if v.strip()})
    return MetadataResponse(genres=genres, venues=venues)


@app.get("/events", response_model=list[EventCandidate], responses=_ERROR_RESPONSES)
def list_events() -> list[EventCandidate]:
    df = get_catalog().get_all_events()
    # Undated or unparseable events sort last
    df["_parsed_date"] = pd.to_datetime(df["date"].map(parse_event_date))
    df = df.sort_values("_parsed_date", na_position="last", kind="mergesort")
    return [EventCandidate(**row) for row in to_records(df.drop(columns="_parsed_date"))]


@app.get("/events/{event_id}", response_model=EventCandidate, responses={404: {"model": ErrorResponse}})
def get_event(event_id: str):
    event = get_catalog().get_event(event_id)
    if event is None:
        return JSONResponse(status_code=404, content={"error": "Event not found"})
    return EventCandidate(**event)


@app.get(
    "/recommend",
    response_model=RecommendResponse,
    response_model_exclude_unset=True,
    responses=_ERROR_RESPONSES,
)
def recommend_events(
    user_id: str | None = Query(None, description="User whose history drives the ranking"),
    region: str | None = Query(None, description="Case-insensitive venue name substring"),
    genres: list[str] | None = Query(None, description="Comma-separated and/or repeated"),
    upcoming_only: bool = Query(False, description="Drop events dated before today"),
    interleave: bool = Query(False, description="Round-robin results across requested genres"),
):
    user = (user_id or "").strip() or DEFAULT_RECOMMENDATION_CONFIG.default_user_id
    if not user:
        return JSONResponse(status_code=400, content={"error": "user_id is required"})

    filters = RecommendationFilters(
        region=(region or "").strip() or None,
        genres=_split_genres(genres),
        upcoming_only=upcoming_only,
        interleave=interleave,
    )

    try:
        result = recommend(user, filters)
    except Exception as exc:
        logger.exception("Recommendation failed for user %r", user)
        return JSONResponse(status_code=500, content={"error": str(exc) or type(exc).__name__})

    response = RecommendResponse(
        user=user,
        date_range=result.date_range,
        recommendations=result.recommendations,
    )
    if result.message:
        response.message = result.message
    return response


# ── Operator endpoints ───────────────────────────────────────────────────


@app.get("/analytics")
def analytics() -> dict:
    return compute_analytics(get_events())
