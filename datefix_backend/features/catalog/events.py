"""
Item change notifications.

A catalog exposes one `EventSource` per notification kind (added, updated).
Handlers are plain callables invoked synchronously on the emitting thread.
"""
from __future__ import annotations

from collections.abc import Callable
from threading import Lock

from ...shared import get_logger
from .models import MediaItem

logger = get_logger(__name__)

ItemHandler = Callable[[MediaItem], None]


class EventSource:
    """Thread-safe list of subscribers for one kind of item event."""

    def __init__(self, name: str):
        self.name = name
        self._lock = Lock()
        self._handlers: list[ItemHandler] = []

    def subscribe(self, handler: ItemHandler) -> None:
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe(self, handler: ItemHandler) -> None:
        with self._lock:
            try:
                self._handlers.remove(handler)
            except ValueError:
                pass

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._handlers)

    def emit(self, item: MediaItem) -> None:
        """
        Deliver `item` to every subscriber.

        A failing handler is logged and skipped; it never breaks delivery to
        the others or propagates into the emitter.
        """
        with self._lock:
            handlers = list(self._handlers)
        for handler in handlers:
            try:
                handler(item)
            except Exception as exc:
                logger.error("%s handler failed for %s: %s", self.name, item.name, exc, exc_info=True)
