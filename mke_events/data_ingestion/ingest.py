from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)


EVENT_COLUMNS: List[str] = [
    "event_id",
    "event_name",
    "genre",
    "venue_name",
    "date",
    "latitude",
    "longitude",
    "description",
    "organizer",
    "ticket_price",
]

HISTORY_COLUMNS: List[str] = ["user_id", "event_id", "visit_date", "rating"]


def _first_present(df: pd.DataFrame, columns: List[str]) -> str | None:
    for col in columns:
        if col in df.columns:
            return col
    return None


def _clean_id(value) -> str | None:
    if value is None or pd.isna(value):
        return None
    cleaned = str(value).strip()
    return cleaned or None


def normalize_events(raw: pd.DataFrame) -> pd.DataFrame:
    """
    Map a raw event export onto the canonical event schema.

    ``price`` is accepted in place of ``ticket_price``. Rows without an
    ``event_id`` are dropped and duplicates keep their first occurrence.
    """
    canonical = pd.DataFrame(index=raw.index)
    for col in EVENT_COLUMNS:
        aliases = [col, "price"] if col == "ticket_price" else [col]
        source = _first_present(raw, aliases)
        canonical[col] = raw[source] if source else pd.NA

    canonical["event_id"] = canonical["event_id"].map(_clean_id)
    canonical["latitude"] = pd.to_numeric(canonical["latitude"], errors="coerce")
    canonical["longitude"] = pd.to_numeric(canonical["longitude"], errors="coerce")

    canonical = canonical.dropna(subset=["event_id"])
    canonical = canonical.drop_duplicates(subset=["event_id"], keep="first")
    return canonical[EVENT_COLUMNS].reset_index(drop=True)


def normalize_history(raw: pd.DataFrame) -> pd.DataFrame:
    """Map a raw user-history export onto the canonical history schema."""
    canonical = pd.DataFrame(index=raw.index)
    for col in HISTORY_COLUMNS:
        canonical[col] = raw[col] if col in raw.columns else pd.NA

    canonical["user_id"] = canonical["user_id"].map(_clean_id)
    canonical["event_id"] = canonical["event_id"].map(_clean_id)
    canonical["rating"] = pd.to_numeric(canonical["rating"], errors="coerce")

    canonical = canonical.dropna(subset=["user_id", "event_id"])
    canonical = canonical.drop_duplicates(subset=["user_id", "event_id"], keep="first")
    return canonical[HISTORY_COLUMNS].reset_index(drop=True)


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> tuple[Path, Path]:
    """
    Execute the ingestion pipeline.

    Steps:
    - Read the raw event and user-history CSV exports.
    - Map raw fields into the canonical schemas.
    - Persist cleaned data as CSV for the recommendation engine.
    """
    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    raw_events = pd.read_csv(config.raw_events_path, dtype=str)
    events = normalize_events(raw_events)
    events.to_csv(config.events_path, index=False)
    logger.info("Wrote %d of %d events to %s", len(events), len(raw_events), config.events_path)

    raw_history = pd.read_csv(config.raw_history_path, dtype=str)
    history = normalize_history(raw_history)
    history.to_csv(config.history_path, index=False)
    logger.info(
        "Wrote %d of %d history rows to %s", len(history), len(raw_history), config.history_path
    )

    return config.events_path, config.history_path


if __name__ == "__main__":
    from ..logging_config import setup_logging

    setup_logging()
    events_path, history_path = run_ingestion()
    print(f"Ingestion complete. Events: {events_path} History: {history_path}")
