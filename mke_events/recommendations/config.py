from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PROCESSED_DIR = Path(__file__).resolve().parent.parent / "data" / "processed"


@dataclass(frozen=True)
class RecommendationConfig:
    history_limit: int = 10
    max_results: int = 50
    genre_weight: float = 0.7
    region_weight: float = 0.3
    near_km: float = 10.0
    mid_km: float = 50.0
    near_score: float = 1.0
    mid_score: float = 0.8
    far_score: float = 0.3
    window_days: int = 5
    default_user_id: str | None = os.getenv("RECOMMEND_DEFAULT_USER_ID") or None

    def __post_init__(self) -> None:
        # Pair scores, and so their mean, stay within [0, 1]
        if self.genre_weight < 0 or self.region_weight < 0:
            raise ValueError("genre_weight and region_weight must be non-negative")
        if self.genre_weight + self.region_weight > 1.0 + 1e-9:
            raise ValueError(
                f"genre_weight + region_weight must not exceed 1, "
                f"got {self.genre_weight + self.region_weight}"
            )
        for name in ("near_score", "mid_score", "far_score"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if not 0 < self.near_km <= self.mid_km:
            raise ValueError("distance tiers need 0 < near_km <= mid_km")


@dataclass(frozen=True)
class DataStoreConfig:
    events_path: Path = field(
        default_factory=lambda: Path(os.getenv("EVENTS_CSV", str(_PROCESSED_DIR / "events.csv")))
    )
    history_path: Path = field(
        default_factory=lambda: Path(
            os.getenv("USER_HISTORY_CSV", str(_PROCESSED_DIR / "user_history.csv"))
        )
    )


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
DEFAULT_DATA_STORE_CONFIG = DataStoreConfig()
