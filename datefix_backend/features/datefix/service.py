"""
Reactive corrector: fixes items as the catalog reports them added/updated.

Usage:
    fixer = DateCreatedFixerService(catalog, ItemCorrector(catalog))
    await fixer.start()
    ...
    await fixer.stop()
"""
from __future__ import annotations

import asyncio
import concurrent.futures
from threading import Lock
from typing import Any, Union

from ...config import STOP_DRAIN_TIMEOUT_S
from ...shared import format_timestamp, get_logger
from ..catalog import Catalog, MediaItem
from .corrector import ItemCorrector
from .guard import ReentrancyGuard

logger = get_logger(__name__)

_PendingUpdate = Union[asyncio.Future, concurrent.futures.Future]
_CANCEL_GRACE_S = 1.0


class DateCreatedFixerService:
    """
    Subscribes to `item_added`/`item_updated` and corrects bad timestamps.

    The file check and the in-memory fix run synchronously on whichever
    thread delivered the event. The catalog write is dispatched as a task on
    the service's event loop and the item id stays reserved in the guard
    until that write finishes, so the `item_updated` echo it causes is
    dropped instead of re-entering the handler.
    """

    def __init__(
        self,
        catalog: Catalog,
        corrector: ItemCorrector,
        guard: ReentrancyGuard | None = None,
        *,
        drain_timeout: float = STOP_DRAIN_TIMEOUT_S,
    ):
        self.catalog = catalog
        self.corrector = corrector
        self.guard = guard or ReentrancyGuard()
        self._drain_timeout = max(0.0, float(drain_timeout))
        self._loop: asyncio.AbstractEventLoop | None = None
        self._running = False
        self._pending_lock = Lock()
        self._pending: set[_PendingUpdate] = set()
        self._started: set[str] = set()  # ids whose save coroutine has begun
        self._stats_lock = Lock()
        self._stats = {"fixed": 0, "failed": 0, "ignored": 0}

    async def start(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Subscribe to catalog events."""
        if self._running:
            return
        self._loop = loop or asyncio.get_running_loop()
        logger.info("Subscribing to catalog events")
        self.catalog.item_added.subscribe(self.on_item_changed)
        self.catalog.item_updated.subscribe(self.on_item_changed)
        self._running = True

    async def stop(self) -> None:
        """Unsubscribe, then drain in-flight saves (cancelling stragglers)."""
        if not self._running:
            return
        logger.info("Unsubscribing from catalog events")
        self.catalog.item_added.unsubscribe(self.on_item_changed)
        self.catalog.item_updated.unsubscribe(self.on_item_changed)
        self._running = False

        remaining = await self.drain(self._drain_timeout)
        if remaining:
            logger.warning("Cancelling %d pending save(s) after %.1fs drain timeout", remaining, self._drain_timeout)
            for fut in self._pending_snapshot():
                fut.cancel()
            await self.drain(_CANCEL_GRACE_S)
        self.guard.clear()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def pending_count(self) -> int:
        with self._pending_lock:
            return len(self._pending)

    def on_item_changed(self, item: MediaItem) -> None:
        """Event handler. Never raises into the event source."""
        try:
            if not self.corrector.needs_attention(item):
                return
            if not self.guard.try_enter(item.id):
                self._bump("ignored")
                logger.debug("Ignoring %s: correction already in flight", item.name)
                return
        except Exception as exc:
            logger.error("Error inspecting %s: %s", getattr(item, "name", item), exc)
            return

        try:
            evaluated = self.corrector.evaluate(item)
            if not evaluated.ok or evaluated.data is None:
                self.guard.leave(item.id)
                logger.error("Error processing %s: %s", item.name, evaluated.error)
                return

            decision = evaluated.data
            if not decision.should_fix:
                self.guard.leave(item.id)
                logger.debug("Skipping %s: %s", item.name, decision.reason.value if decision.reason else "no fix")
                return

            old = self.corrector.apply(item, decision)
            logger.info(
                "Fixing %s DateCreated from %s to %s",
                item.name,
                format_timestamp(old),
                format_timestamp(item.date_created),
            )
            self._dispatch_save(item)
        except Exception as exc:
            self.guard.leave(item.id)
            logger.error("Error processing %s: %s", item.name, exc, exc_info=True)

    def _dispatch_save(self, item: MediaItem) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            raise RuntimeError("fixer service has no event loop")

        try:
            current = asyncio.get_running_loop()
        except RuntimeError:
            current = None

        coro = self._save(item)
        try:
            if current is loop:
                fut: _PendingUpdate = loop.create_task(coro)
            else:
                fut = asyncio.run_coroutine_threadsafe(coro, loop)
        except Exception:
            coro.close()
            raise

        with self._pending_lock:
            self._pending.add(fut)
        fut.add_done_callback(lambda f, item_id=item.id: self._on_save_done(f, item_id))

    def _on_save_done(self, fut: _PendingUpdate, item_id: str) -> None:
        with self._pending_lock:
            self._pending.discard(fut)
        if not fut.cancelled():
            return
        # A save cancelled before its first step never reaches `finally`.
        # One that started releases the guard itself once it has stopped.
        with self._pending_lock:
            started = item_id in self._started
        if not started:
            self.guard.leave(item_id)

    async def _save(self, item: MediaItem) -> None:
        with self._pending_lock:
            self._started.add(item.id)
        try:
            res = await self.corrector.persist(item)
            if res.ok:
                self._bump("fixed")
            else:
                self._bump("failed")
                logger.error("Failed to save %s: %s", item.name, res.error)
        except Exception as exc:
            self._bump("failed")
            logger.error("Failed to save %s: %s", item.name, exc, exc_info=True)
        finally:
            with self._pending_lock:
                self._started.discard(item.id)
            self.guard.leave(item.id)

    async def drain(self, timeout: float | None = None) -> int:
        """Wait for dispatched saves. Returns how many are still running."""
        futures = self._pending_snapshot()
        if not futures:
            return 0
        waitables = [f if isinstance(f, asyncio.Future) else asyncio.wrap_future(f) for f in futures]
        _done, not_done = await asyncio.wait(waitables, timeout=timeout)
        return len(not_done)

    def _pending_snapshot(self) -> list[_PendingUpdate]:
        with self._pending_lock:
            return list(self._pending)

    def _bump(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] = self._stats.get(key, 0) + 1

    def get_runtime_status(self) -> dict[str, Any]:
        with self._stats_lock:
            stats = dict(self._stats)
        return {
            "running": self._running,
            "pending_saves": self.pending_count,
            "in_flight": len(self.guard),
            **stats,
        }
