from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class AnalyticsConfig:
    # Oldest events are dropped once the log holds this many
    max_events: int = int(os.getenv("ANALYTICS_MAX_EVENTS", "10000"))

    def __post_init__(self) -> None:
        if self.max_events < 1:
            raise ValueError(f"max_events must be positive, got {self.max_events}")


DEFAULT_ANALYTICS_CONFIG = AnalyticsConfig()
