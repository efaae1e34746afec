from __future__ import annotations

import time
from collections import deque
from typing import Any

from .config import DEFAULT_ANALYTICS_CONFIG, AnalyticsConfig


class EventLog:
    """Bounded in-memory log of request events, oldest first."""

    def __init__(self, config: AnalyticsConfig = DEFAULT_ANALYTICS_CONFIG) -> None:
        self._entries: deque[dict[str, Any]] = deque(maxlen=config.max_events)

    def append(self, event_type: str, data: dict[str, Any]) -> None:
        self._entries.append({"type": event_type, "timestamp": time.time(), **data})

    def snapshot(self) -> list[dict[str, Any]]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_log = EventLog()


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _log.append(event_type, data)


def get_events() -> list[dict[str, Any]]:
    return _log.snapshot()


def clear_events() -> None:
    _log.clear()
