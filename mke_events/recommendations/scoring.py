"""
Similarity scoring between a user's past events and candidate events.

Each (history entry, candidate) pair is scored as a weighted blend of a
genre score and a distance-tier region score; a candidate's similarity is
the mean of its pair scores over the whole history. The functions accept
scalars or array-likes so the scorer can evaluate one history entry against
every candidate in a single vectorised pass.
"""
from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig

EARTH_RADIUS_KM = 6371.0


def _normalize_genre(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value).strip().casefold()


def genre_score(past_genre: Any, candidate_genre: Any) -> float:
    """1.0 for the same genre, 0.5 for two different genres, 0.0 if either is missing."""
    a = _normalize_genre(past_genre)
    b = _normalize_genre(candidate_genre)
    if not a or not b:
        return 0.0
    return 1.0 if a == b else 0.5


def genre_scores(past_genre: Any, candidate_genres: pd.Series) -> np.ndarray:
    past = _normalize_genre(past_genre)
    normalized = candidate_genres.map(_normalize_genre)
    if not past:
        return np.zeros(len(normalized))
    return np.where(normalized == "", 0.0, np.where(normalized == past, 1.0, 0.5))


def haversine_km(lat1, lon1, lat2, lon2):
    """Great-circle distance in kilometres. NaN in, NaN out."""
    lat1, lon1, lat2, lon2 = (
        np.radians(np.asarray(v, dtype=float)) for v in (lat1, lon1, lat2, lon2)
    )
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    distance = EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return float(distance) if np.ndim(distance) == 0 else distance


def region_score(distance_km, config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG):
    # NaN compares False everywhere and lands in the far tier
    d = np.asarray(distance_km, dtype=float)
    score = np.where(
        d < config.near_km,
        config.near_score,
        np.where(d < config.mid_km, config.mid_score, config.far_score),
    )
    return float(score) if np.ndim(score) == 0 else score


def pair_score(
    genre: float,
    region: float,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
):
    return config.genre_weight * genre + config.region_weight * region


def similarity_scores(
    history: pd.DataFrame,
    candidates: pd.DataFrame,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> pd.Series:
    """
    Average pair score of every candidate against every history entry.

    ``history`` must be non-empty. Returns a Series aligned with
    ``candidates.index``.
    """
    if history.empty:
        raise ValueError("similarity_scores requires at least one history entry")

    total = np.zeros(len(candidates))
    for past in history.itertuples(index=False):
        distances = haversine_km(
            past.latitude, past.longitude, candidates["latitude"], candidates["longitude"]
        )
        total += pair_score(
            genre_scores(past.genre, candidates["genre"]),
            region_score(distances, config),
            config,
        )

    return pd.Series(total / len(history), index=candidates.index, name="similarity_score")
