"""Thread-safe ring buffer for bot events exposed via the API."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BotEvent:
    """A single input or combat event for the API event feed."""

    timestamp: float
    category: str
    message: str
    unit_ids: tuple[int, ...] = ()  # Monsters involved in this event


class EventLog:
    """Bounded event log. Writers append; readers snapshot a slice.

    Thread-safe via a simple lock: the control thread writes, the API
    thread reads non-blocking copies.
    """

    __slots__ = ("_buffer", "_lock")

    def __init__(self, capacity: int = 2000) -> None:
        self._buffer: deque[BotEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, event: BotEvent) -> None:
        with self._lock:
            self._buffer.append(event)

    def since(self, timestamp: float) -> list[BotEvent]:
        """Return all events with timestamp >= *timestamp*."""
        with self._lock:
            return [e for e in self._buffer if e.timestamp >= timestamp]

    def latest(self, count: int = 50) -> list[BotEvent]:
        """Return the *count* most recent events."""
        with self._lock:
            items = list(self._buffer)
        return items[-count:]

    def by_category(self, category: str) -> list[BotEvent]:
        with self._lock:
            return [e for e in self._buffer if e.category == category]

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)
