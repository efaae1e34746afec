from __future__ import annotations

import logging
import time
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pandas as pd

from ..analytics.store import record_event
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .data_store import EventCatalog, HistoryStore, get_catalog, get_history_store
from .errors import DataStoreError
from .models import (
    EVENT_COLUMNS,
    DateRange,
    RecommendationFilters,
    RecommendationResult,
    ScoredRecommendation,
)
from .scoring import similarity_scores

logger = logging.getLogger(__name__)

NO_HISTORY_MESSAGE = "No history found for this user."

_EVENT_DATE_FORMATS = ("%m/%d/%y", "%m/%d/%Y", "%Y-%m-%d")

# Failures a history lookup can hit while loading or joining its data
_HISTORY_LOOKUP_ERRORS = (
    DataStoreError,
    OSError,
    pd.errors.ParserError,
    pd.errors.EmptyDataError,
)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def compute_date_range(
    today: date | None = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> DateRange:
    """Display window echoed back to clients. It never filters candidates."""
    start = today or utc_today()
    end = start + timedelta(days=config.window_days)
    return DateRange(from_=start.isoformat(), to=end.isoformat())


def parse_event_date(value: Any) -> date | None:
    """Parse catalog dates such as ``3/14/25`` or ``2025-03-14``."""
    if value is None or pd.isna(value):
        return None
    raw = str(value).strip()
    for fmt in _EVENT_DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def _is_upcoming(value: Any, cutoff: date) -> bool:
    parsed = parse_event_date(value)
    return parsed is not None and parsed >= cutoff


def apply_filters(
    events: pd.DataFrame,
    filters: RecommendationFilters,
    today: date | None = None,
) -> pd.DataFrame:
    mask = pd.Series(True, index=events.index)

    if filters.region:
        region = filters.region.strip().casefold()
        mask &= (
            events["venue_name"]
            .fillna("")
            .str.casefold()
            .str.contains(region, regex=False)
        )

    if filters.genres:
        mask &= events["genre"].isin(filters.genres)

    if filters.upcoming_only:
        cutoff = today or utc_today()
        mask &= events["date"].map(lambda d: _is_upcoming(d, cutoff)).astype(bool)

    filtered = events.loc[mask]
    logger.debug(
        "Filters region=%r genres=%r upcoming_only=%s: %d -> %d events",
        filters.region,
        filters.genres,
        filters.upcoming_only,
        len(events),
        len(filtered),
    )
    return filtered


def interleave_by_genre(ranked: pd.DataFrame, genres: list[str]) -> pd.DataFrame:
    """Round-robin the ranked rows across ``genres`` in request order."""
    ordered_genres = list(dict.fromkeys(genres))
    groups = {g: ranked[ranked["genre"] == g] for g in ordered_genres}
    longest = max((len(g) for g in groups.values()), default=0)

    positions: list[Any] = []
    for i in range(longest):
        for genre in ordered_genres:
            group = groups[genre]
            if i < len(group):
                positions.append(group.index[i])
    return ranked.loc[positions]


def _to_recommendation(row: dict[str, Any]) -> ScoredRecommendation:
    record = {
        col: (None if pd.isna(row[col]) else row[col]) for col in EVENT_COLUMNS
    }
    return ScoredRecommendation(**record, similarity_score=float(row["similarity_score"]))


def _load_history(
    user_id: str,
    history_store: HistoryStore | None,
    config: RecommendationConfig,
) -> tuple[pd.DataFrame, str]:
    try:
        store = history_store or get_history_store()
        history = store.get_history_for_user(user_id, config.history_limit)
    except _HISTORY_LOOKUP_ERRORS:
        # Reported to callers as "no history"; operators see the cause here
        logger.warning("History lookup failed for user %r", user_id, exc_info=True)
        return pd.DataFrame(), "unavailable"
    if history.empty:
        return history, "empty"
    return history, "ok"


def recommend(
    user_id: str,
    filters: RecommendationFilters | None = None,
    *,
    history_store: HistoryStore | None = None,
    catalog: EventCatalog | None = None,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
    today: date | None = None,
) -> RecommendationResult:
    """
    Rank catalog events by similarity to ``user_id``'s attendance history.

    A missing or unreachable history yields an empty result with
    ``NO_HISTORY_MESSAGE``. Catalog failures propagate to the caller.
    """
    start_time = time.time()
    filters = filters or RecommendationFilters()
    today = today or utc_today()
    date_range = compute_date_range(today, config)

    history, history_status = _load_history(user_id, history_store, config)

    if history_status != "ok":
        _record_search(user_id, filters, history_status, 0, 0, start_time)
        return RecommendationResult(
            date_range=date_range,
            recommendations=[],
            total_candidates=0,
            message=NO_HISTORY_MESSAGE,
        )

    events = (catalog or get_catalog()).get_all_events()
    candidates = apply_filters(events, filters, today)

    ranked = candidates.assign(
        similarity_score=similarity_scores(history, candidates, config)
    ).sort_values("similarity_score", ascending=False, kind="mergesort")

    if filters.interleave and len(set(filters.genres)) > 1:
        ranked = interleave_by_genre(ranked, filters.genres)

    top = ranked.head(config.max_results)
    items = [_to_recommendation(row) for row in top.to_dict(orient="records")]

    _record_search(user_id, filters, history_status, len(candidates), len(items), start_time)

    return RecommendationResult(
        date_range=date_range,
        recommendations=items,
        total_candidates=len(candidates),
    )


def _record_search(
    user_id: str,
    filters: RecommendationFilters,
    history_status: str,
    total_candidates: int,
    results_returned: int,
    start_time: float,
) -> None:
    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("recommend", {
        "user_id": user_id,
        "region": filters.region,
        "genres": filters.genres,
        "upcoming_only": filters.upcoming_only,
        "interleave": filters.interleave,
        "history_status": history_status,
        "total_candidates": total_candidates,
        "results_returned": results_returned,
        "response_time_ms": elapsed_ms,
    })
