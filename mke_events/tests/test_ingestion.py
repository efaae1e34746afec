from pathlib import Path

import pandas as pd

from mke_events.data_ingestion.config import IngestionConfig
from mke_events.data_ingestion.ingest import (
    EVENT_COLUMNS,
    HISTORY_COLUMNS,
    normalize_events,
    normalize_history,
    run_ingestion,
)


def test_normalize_events_maps_price_alias_and_coerces_coordinates():
    raw = pd.DataFrame([
        {"event_id": "e1", "event_name": "Jazz", "genre": "Music", "latitude": "43.04",
         "longitude": "-87.90", "price": "15"},
        {"event_id": "e2", "event_name": "Chess", "genre": "Games", "latitude": "n/a",
         "longitude": "", "price": None},
    ])

    events = normalize_events(raw)

    assert list(events.columns) == EVENT_COLUMNS
    assert events.loc[0, "ticket_price"] == "15"
    assert events.loc[0, "latitude"] == 43.04
    assert pd.isna(events.loc[1, "latitude"])
    assert pd.isna(events.loc[1, "longitude"])


def test_normalize_events_drops_missing_and_duplicate_ids():
    raw = pd.DataFrame([
        {"event_id": "e1", "event_name": "First"},
        {"event_id": " ", "event_name": "Blank"},
        {"event_id": None, "event_name": "Missing"},
        {"event_id": "e1", "event_name": "Duplicate"},
    ])

    events = normalize_events(raw)

    assert events["event_id"].tolist() == ["e1"]
    assert events.loc[0, "event_name"] == "First"


def test_normalize_history_dedupes_user_event_pairs():
    raw = pd.DataFrame([
        {"user_id": "user_1", "event_id": "e1", "visit_date": "1/2/25", "rating": "4.5"},
        {"user_id": "user_1", "event_id": "e1", "visit_date": "1/9/25", "rating": "3"},
        {"user_id": "user_1", "event_id": "e2", "rating": "great"},
        {"user_id": None, "event_id": "e3"},
    ])

    history = normalize_history(raw)

    assert list(history.columns) == HISTORY_COLUMNS
    assert history["event_id"].tolist() == ["e1", "e2"]
    assert history.loc[0, "rating"] == 4.5
    assert pd.isna(history.loc[1, "rating"])


def test_run_ingestion_writes_processed_files(tmp_path: Path):
    """
    End-to-end ingestion into a temporary directory so real data stays untouched.
    """
    cfg = IngestionConfig(
        raw_data_dir=tmp_path / "raw",
        processed_data_dir=tmp_path / "processed",
    )
    cfg.raw_data_dir.mkdir()
    pd.DataFrame([
        {"event_id": "e1", "event_name": "Jazz", "genre": "Music", "venue_name": "Pabst Theater",
         "date": "1/15/26", "latitude": 43.04, "longitude": -87.9, "price": "20"},
    ]).to_csv(cfg.raw_events_path, index=False)
    pd.DataFrame([
        {"user_id": "user_1", "event_id": "e1", "visit_date": "1/2/25", "rating": 5},
    ]).to_csv(cfg.raw_history_path, index=False)

    events_path, history_path = run_ingestion(config=cfg)

    assert events_path.is_file(), "Processed events CSV should be created"
    assert history_path.is_file(), "Processed history CSV should be created"
    events = pd.read_csv(events_path)
    assert list(events.columns) == EVENT_COLUMNS
    assert len(events) == 1
    assert list(pd.read_csv(history_path).columns) == HISTORY_COLUMNS
