from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .config import DEFAULT_DATA_STORE_CONFIG, DataStoreConfig
from .errors import CatalogError, HistoryStoreError
from .models import EVENT_COLUMNS, HISTORY_COLUMNS

logger = logging.getLogger(__name__)

_TEXT_EVENT_COLUMNS = [c for c in EVENT_COLUMNS if c not in ("latitude", "longitude")]


def _normalize_events(df: pd.DataFrame) -> pd.DataFrame:
    missing = {"event_id", "genre", "venue_name", "latitude", "longitude"} - set(df.columns)
    if missing:
        raise CatalogError(f"Event catalog is missing columns: {sorted(missing)}")

    df = df.copy()
    for col in EVENT_COLUMNS:
        if col not in df.columns:
            df[col] = None

    # Unusable coordinates become NaN so distance maths never raises
    df["latitude"] = pd.to_numeric(df["latitude"], errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")

    for col in _TEXT_EVENT_COLUMNS:
        df[col] = df[col].map(lambda v: None if pd.isna(v) else str(v)).astype(object)

    return df[EVENT_COLUMNS].reset_index(drop=True)


def to_records(df: pd.DataFrame) -> list[dict]:
    """Rows as plain dicts with NaN replaced by None."""
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


class EventCatalog:
    """Read-only event catalog held as a DataFrame in catalog order."""

    def __init__(self, events: pd.DataFrame) -> None:
        self._events = _normalize_events(events)

    @classmethod
    def from_csv(cls, path: Path) -> "EventCatalog":
        try:
            df = pd.read_csv(path, dtype={"event_id": str, "ticket_price": str, "date": str})
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise CatalogError(f"Could not read event catalog from {path}: {exc}") from exc
        logger.info("Loaded %d events from %s", len(df), path)
        return cls(df)

    def get_all_events(self) -> pd.DataFrame:
        return self._events.copy()

    def get_event(self, event_id: str) -> dict | None:
        match = self._events[self._events["event_id"] == str(event_id)]
        if match.empty:
            return None
        return to_records(match.head(1))[0]


class HistoryStore:
    """User attendance history, joined against the catalog on lookup."""

    def __init__(self, history: pd.DataFrame, catalog: EventCatalog) -> None:
        missing = {"user_id", "event_id"} - set(history.columns)
        if missing:
            raise HistoryStoreError(f"User history is missing columns: {sorted(missing)}")
        self._history = history[["user_id", "event_id"]].astype(str).reset_index(drop=True)
        self._catalog = catalog

    @classmethod
    def from_csv(cls, path: Path, catalog: EventCatalog) -> "HistoryStore":
        try:
            df = pd.read_csv(path, dtype=str)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise HistoryStoreError(f"Could not read user history from {path}: {exc}") from exc
        logger.info("Loaded %d history rows from %s", len(df), path)
        return cls(df, catalog)

    def get_history_for_user(self, user_id: str, limit: int = 10) -> pd.DataFrame:
        """Return up to ``limit`` history rows with the event's genre and coordinates."""
        rows = self._history[self._history["user_id"] == user_id]
        events = self._catalog.get_all_events()[["event_id", "genre", "latitude", "longitude"]]
        # Inner join: history rows whose event is gone from the catalog are skipped
        joined = rows.merge(events, on="event_id", how="inner")
        return joined[HISTORY_COLUMNS].head(limit).reset_index(drop=True)


_catalog: EventCatalog | None = None
_history_store: HistoryStore | None = None


def get_catalog(config: DataStoreConfig = DEFAULT_DATA_STORE_CONFIG) -> EventCatalog:
    """Return the process-wide event catalog, loading it on first call."""
    global _catalog
    if _catalog is None:
        _catalog = EventCatalog.from_csv(config.events_path)
    return _catalog


def get_history_store(config: DataStoreConfig = DEFAULT_DATA_STORE_CONFIG) -> HistoryStore:
    """Return the process-wide history store, loading it on first call."""
    global _history_store
    if _history_store is None:
        _history_store = HistoryStore.from_csv(config.history_path, get_catalog(config))
    return _history_store


def set_stores(catalog: EventCatalog, history_store: HistoryStore) -> None:
    """Install pre-built stores, e.g. in-memory fixtures."""
    global _catalog, _history_store
    _catalog = catalog
    _history_store = history_store


def reset_stores() -> None:
    global _catalog, _history_store
    _catalog = None
    _history_store = None
