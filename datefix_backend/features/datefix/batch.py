"""
Batch reconciler: sweep the catalog and fix every item with a bad timestamp.
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Sequence
from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any

from ...config import BAD_DATE_YEAR, BATCH_CONCURRENCY, BATCH_ITEM_KINDS, PROGRESS_REPORT_EVERY
from ...shared import ErrorCode, ItemKind, Result, get_logger, timer
from ..catalog import CancelSignal, Catalog, MediaItem
from .corrector import ItemCorrector

logger = get_logger(__name__)

ProgressSink = Callable[[float], None]


@dataclass(frozen=True)
class BatchSummary:
    scanned: int      # items returned by the catalog query
    total: int        # candidates left after the local pre-filter
    submitted: int    # candidates handed to a worker
    fixed: int
    skipped: int
    errored: int
    cancelled: bool = False

    @property
    def unsubmitted(self) -> int:
        return self.total - self.submitted

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["unsubmitted"] = self.unsubmitted
        return data


class _Counters:
    """fixed/skipped/errored with lock-protected increments."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._values = {"fixed": 0, "skipped": 0, "errored": 0}

    def increment(self, key: str) -> int:
        with self._lock:
            self._values[key] += 1
            return self._values[key]

    def get(self, key: str) -> int:
        with self._lock:
            return self._values[key]

    @property
    def completed(self) -> int:
        with self._lock:
            return sum(self._values.values())


def _is_cancelled(cancel: CancelSignal | None) -> bool:
    return bool(cancel is not None and cancel.is_set())


def _report(progress: ProgressSink | None, percent: float) -> None:
    if progress is None:
        return
    try:
        progress(max(0.0, min(100.0, float(percent))))
    except Exception as exc:
        logger.debug("Progress sink failed: %s", exc)


class BatchReconciler:
    """
    Drives `ItemCorrector.correct` over the whole catalog with at most
    `concurrency` items in flight.

    The submitting loop acquires a semaphore slot before creating each
    worker task, so a slow catalog throttles submission instead of piling up
    tasks. Cancellation is checked before every submission; work already
    handed to a worker finishes (or sees the cancel signal through the
    catalog call). One failing item never stops the sweep.
    """

    def __init__(
        self,
        catalog: Catalog,
        corrector: ItemCorrector,
        *,
        concurrency: int = BATCH_CONCURRENCY,
        kinds: Sequence[ItemKind] = BATCH_ITEM_KINDS,
        progress_every: int = PROGRESS_REPORT_EVERY,
        bad_year: int = BAD_DATE_YEAR,
    ):
        self.catalog = catalog
        self.corrector = corrector
        self.concurrency = max(1, int(concurrency))
        self.kinds = tuple(kinds)
        self.progress_every = max(1, int(progress_every))
        self.bad_year = int(bad_year)

    def select_candidates(self, items: Iterable[MediaItem]) -> list[MediaItem]:
        """Coarse local filter: old enough year and a backing path."""
        return [item for item in items if item.date_created.year <= self.bad_year and item.is_file_backed]

    async def run(
        self,
        progress: ProgressSink | None = None,
        cancel: CancelSignal | None = None,
        *,
        kinds: Sequence[ItemKind] | None = None,
        concurrency: int | None = None,
    ) -> Result[BatchSummary]:
        """
        Sweep the catalog.

        Args:
            progress: Called with a percentage (0-100)
            cancel: Checked before each submission
            kinds: Item kinds to query (default: configured kinds)
            concurrency: Pool size override

        Returns:
            Result[BatchSummary]; Err only when the catalog query fails.
        """
        logger.info("Batch task starting")
        limit = max(1, int(concurrency or self.concurrency))
        query_kinds = tuple(kinds) if kinds else self.kinds

        with timer("catalog query", logger):
            queried = await self.catalog.query_items(query_kinds, recursive=True)
        if not queried.ok:
            logger.error("Catalog query failed: %s", queried.error)
            return Result.Err(queried.code or ErrorCode.DB_ERROR, queried.error or "catalog query failed")

        items = queried.data or []
        candidates = self.select_candidates(items)
        total = len(candidates)
        logger.info("Found %d total items, %d with bad dates to check", len(items), total)

        counters = _Counters()
        semaphore = asyncio.Semaphore(limit)
        tasks: list[asyncio.Task[None]] = []
        cancelled = False

        try:
            for item in candidates:
                if _is_cancelled(cancel):
                    cancelled = True
                    break
                await semaphore.acquire()
                if _is_cancelled(cancel):
                    semaphore.release()
                    cancelled = True
                    break
                tasks.append(asyncio.create_task(self._process(item, semaphore, counters, total, progress, cancel)))

            if tasks:
                await asyncio.gather(*tasks)
        except asyncio.CancelledError:
            # Workers never outlive the sweep.
            logger.warning("Batch task interrupted; stopping %d worker(s)", sum(1 for t in tasks if not t.done()))
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        summary = BatchSummary(
            scanned=len(items),
            total=total,
            submitted=len(tasks),
            fixed=counters.get("fixed"),
            skipped=counters.get("skipped"),
            errored=counters.get("errored"),
            cancelled=cancelled,
        )
        _report(progress, 100.0)
        if cancelled:
            logger.warning("Batch task cancelled after submitting %d of %d items", summary.submitted, total)
        logger.info(
            "Batch task completed. Fixed: %d, Skipped: %d, Errors: %d",
            summary.fixed,
            summary.skipped,
            summary.errored,
        )
        return Result.Ok(summary)

    async def _process(
        self,
        item: MediaItem,
        semaphore: asyncio.Semaphore,
        counters: _Counters,
        total: int,
        progress: ProgressSink | None,
        cancel: CancelSignal | None,
    ) -> None:
        try:
            res = await self.corrector.correct(item, cancel)
            if not res.ok or res.data is None:
                counters.increment("errored")
                logger.warning("Error fixing %s: [%s] %s", item.name, res.code, res.error)
            elif res.data.fixed:
                fixed = counters.increment("fixed")
                if fixed % self.progress_every == 0:
                    _report(progress, counters.completed / max(1, total) * 100.0)
                    logger.info("Fixed %d items so far...", fixed)
            else:
                counters.increment("skipped")
        except Exception as exc:
            counters.increment("errored")
            logger.warning("Error fixing %s: %s", item.name, exc, exc_info=True)
        finally:
            semaphore.release()
