"""
Per-item in-flight markers for the reactive corrector.

Saving an item makes the catalog emit `item_updated` for it, which would run
the reactive handler again. An id stays reserved here until the save that
caused it has finished, so the echo is ignored.
"""
from __future__ import annotations

import time
from threading import Lock


class ReentrancyGuard:
    """Atomic test-and-set over item ids; safe from any thread."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._in_flight: dict[str, float] = {}  # item id -> monotonic entry time

    def try_enter(self, item_id: str) -> bool:
        """Reserve `item_id`. False if it is already reserved."""
        with self._lock:
            if item_id in self._in_flight:
                return False
            self._in_flight[item_id] = time.monotonic()
            return True

    def leave(self, item_id: str) -> None:
        """Release `item_id`. Releasing an unknown id is a no-op."""
        with self._lock:
            self._in_flight.pop(item_id, None)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._in_flight

    def __len__(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def snapshot(self) -> dict[str, float]:
        """Copy of id -> seconds held, for status reporting."""
        now = time.monotonic()
        with self._lock:
            return {k: round(now - v, 3) for k, v in self._in_flight.items()}

    def clear(self) -> None:
        with self._lock:
            self._in_flight.clear()
