import itertools
import math

import numpy as np
import pandas as pd
import pytest

from mke_events.recommendations.scoring import (
    genre_score,
    genre_scores,
    haversine_km,
    pair_score,
    region_score,
    similarity_scores,
)

KM_PER_DEGREE_LAT = 2 * math.pi * 6371.0 / 360


def _events(rows):
    return pd.DataFrame(rows, columns=["genre", "latitude", "longitude"])


# ── Genre score ──────────────────────────────────────────────────────────


def test_genre_score_exact_match_ignores_case_and_whitespace():
    assert genre_score("Music", "  music ") == 1.0


def test_genre_score_different_genres():
    assert genre_score("Music", "Sports") == 0.5


@pytest.mark.parametrize("a, b", [("", "Music"), ("Music", None), (None, None), ("   ", "Music")])
def test_genre_score_missing_genre(a, b):
    assert genre_score(a, b) == 0.0


def test_genre_scores_vectorised_matches_scalar():
    candidates = pd.Series(["Music", "FOOD", None, "", "music"])
    result = genre_scores("Music", candidates)
    assert list(result) == [genre_score("Music", c) for c in candidates]


def test_genre_scores_empty_history_genre():
    result = genre_scores(None, pd.Series(["Music", "Food"]))
    assert list(result) == [0.0, 0.0]


# ── Distance ─────────────────────────────────────────────────────────────


def test_haversine_zero_for_same_point():
    assert haversine_km(43.0389, -87.9065, 43.0389, -87.9065) == 0.0


def test_haversine_one_degree_of_latitude():
    assert haversine_km(43.0, -87.9, 44.0, -87.9) == pytest.approx(KM_PER_DEGREE_LAT, rel=1e-9)


def test_haversine_milwaukee_to_chicago():
    # Roughly 130 km between the two downtowns
    assert haversine_km(43.0389, -87.9065, 41.8781, -87.6298) == pytest.approx(131, abs=3)


def test_haversine_nan_coordinates_do_not_raise():
    assert math.isnan(haversine_km(float("nan"), -87.9, 43.0, -87.9))


def test_haversine_vectorised():
    result = haversine_km(43.0, -87.9, np.array([43.0, 44.0]), np.array([-87.9, -87.9]))
    assert result.shape == (2,)
    assert result[0] == 0.0


# ── Region tiers ─────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "distance, expected",
    [(0.0, 1.0), (9.99, 1.0), (10.0, 0.8), (49.9, 0.8), (50.0, 0.3), (500.0, 0.3)],
)
def test_region_score_tiers(distance, expected):
    assert region_score(distance) == expected


def test_region_score_nan_is_far_tier():
    assert region_score(float("nan")) == 0.3


def test_pair_score_weights():
    assert pair_score(1.0, 1.0) == pytest.approx(1.0)
    assert pair_score(0.5, 1.0) == pytest.approx(0.65)
    assert pair_score(0.5, 0.3) == pytest.approx(0.44)


# ── Similarity ───────────────────────────────────────────────────────────


def test_exact_genre_match_dominates():
    history = _events([("Music", 43.04, -87.90)])
    candidates = _events([("Music", 43.04, -87.90), ("Sports", 43.04, -87.90)])

    scores = similarity_scores(history, candidates)

    assert scores.iloc[0] == pytest.approx(1.0)
    assert scores.iloc[1] == pytest.approx(0.65)
    assert scores.iloc[0] > scores.iloc[1]


def test_distance_tiers_strictly_decrease_score():
    history = _events([("Music", 43.0, -87.9)])
    offsets_km = [5, 30, 100]
    candidates = _events(
        [("Music", 43.0 + km / KM_PER_DEGREE_LAT, -87.9) for km in offsets_km]
    )

    scores = similarity_scores(history, candidates).tolist()

    assert scores == pytest.approx([0.7 + 0.3 * 1.0, 0.7 + 0.3 * 0.8, 0.7 + 0.3 * 0.3])
    assert scores[0] > scores[1] > scores[2]


def test_similarity_is_average_over_history():
    history = _events([("Music", 43.0, -87.9), ("Food", 43.0, -87.9)])
    candidates = _events([("Music", 43.0, -87.9)])

    score = similarity_scores(history, candidates).iloc[0]

    assert score == pytest.approx((1.0 + 0.65) / 2)


def test_missing_coordinates_degrade_to_far_tier():
    history = _events([("Music", None, -87.9)])
    candidates = _events([("Music", 43.0, -87.9), ("Music", 43.0, float("nan"))])

    scores = similarity_scores(history, candidates)

    assert scores.tolist() == pytest.approx([0.7 + 0.09, 0.7 + 0.09])


def test_scores_bounded_between_zero_and_one():
    genres = ["Music", "Sports", "", None]
    points = [(43.04, -87.9), (43.3, -88.1), (45.0, -90.0), (float("nan"), -87.9)]
    history = _events(
        [(g, lat, lon) for g, (lat, lon) in itertools.product(genres[:2], points[:3])]
    )
    candidates = _events([(g, lat, lon) for g, (lat, lon) in itertools.product(genres, points)])

    scores = similarity_scores(history, candidates)

    assert len(scores) == len(candidates)
    assert ((scores >= 0.0) & (scores <= 1.0)).all()


def test_scores_align_with_candidate_index():
    history = _events([("Music", 43.0, -87.9)])
    candidates = _events([("Music", 43.0, -87.9), ("Food", 43.0, -87.9)]).set_axis([7, 3])

    scores = similarity_scores(history, candidates)

    assert list(scores.index) == [7, 3]


def test_empty_history_rejected():
    with pytest.raises(ValueError):
        similarity_scores(_events([]), _events([("Music", 43.0, -87.9)]))
