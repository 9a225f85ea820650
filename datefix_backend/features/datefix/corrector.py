"""
Single-item corrector: heuristic + file probe + catalog write for one item.
"""
from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ...adapters.fs import FileProbe
from ...config import BAD_DATE_THRESHOLD
from ...shared import ErrorCode, Result, SkipReason, UpdateKind, get_logger, utc_now
from ..catalog import CancelSignal, Catalog, MediaItem
from .heuristic import CorrectionDecision, decide, is_bad_timestamp

logger = get_logger(__name__)


@dataclass(frozen=True)
class CorrectionOutcome:
    """What happened to one item (failures travel as `Result.Err`)."""

    item_id: str
    name: str
    fixed: bool
    reason: SkipReason | None = None
    old_timestamp: datetime | None = None
    new_timestamp: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "name": self.name,
            "fixed": self.fixed,
            "reason": self.reason.value if self.reason else None,
            "old_timestamp": self.old_timestamp.isoformat() if self.old_timestamp else None,
            "new_timestamp": self.new_timestamp.isoformat() if self.new_timestamp else None,
        }


class ItemCorrector:
    """
    Applies the timestamp heuristic to one item and persists the fix.

    The phases are public because the reactive path runs `evaluate` and
    `apply` synchronously on the delivering thread and `persist` later as a
    detached task. `correct` runs all three for the batch path.

    Nothing here raises: probe and catalog failures come back as
    `Result.Err` with `UNEXPECTED_FAILURE` or `UPDATE_FAILED`. Logging and
    counting are left to the caller.
    """

    def __init__(
        self,
        catalog: Catalog,
        probe: FileProbe | None = None,
        *,
        threshold: datetime = BAD_DATE_THRESHOLD,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.catalog = catalog
        self.probe = probe or FileProbe()
        self.threshold = threshold
        self._clock = clock

    def needs_attention(self, item: MediaItem) -> bool:
        """Cheap local check: bad timestamp and a path. No I/O."""
        return item.is_file_backed and is_bad_timestamp(item.date_created, self.threshold)

    def evaluate(self, item: MediaItem) -> Result[CorrectionDecision]:
        """Stat the backing file once and run the heuristic (blocking I/O)."""
        if not is_bad_timestamp(item.date_created, self.threshold):
            return Result.Ok(CorrectionDecision.skip(SkipReason.NOT_BAD))
        if not item.is_file_backed:
            return Result.Ok(CorrectionDecision.skip(SkipReason.NOT_FILE_BACKED))
        try:
            state = self.probe.stat(str(item.path))
        except Exception as exc:
            return Result.Err(
                ErrorCode.UNEXPECTED_FAILURE,
                f"Failed to probe file: {exc}",
                item_id=item.id,
                name=item.name,
            )
        decision = decide(
            item.date_created,
            state is not None,
            state.last_modified if state is not None else None,
            now=self._clock(),
            threshold=self.threshold,
        )
        return Result.Ok(decision)

    @staticmethod
    def apply(item: MediaItem, decision: CorrectionDecision) -> datetime:
        """Write the new timestamp into the in-memory item; returns the old one."""
        if not decision.should_fix or decision.new_timestamp is None:
            raise ValueError("apply() called with a skip decision")
        old = item.date_created
        item.date_created = decision.new_timestamp
        return old

    async def persist(self, item: MediaItem, cancel: CancelSignal | None = None) -> Result[MediaItem]:
        """Submit the item to the catalog as a metadata edit."""
        try:
            res = await self.catalog.update_item(item, item.parent_id, UpdateKind.METADATA_EDIT, cancel)
        except Exception as exc:
            return Result.Err(ErrorCode.UPDATE_FAILED, str(exc) or type(exc).__name__, item_id=item.id, name=item.name)
        if res is None or not res.ok:
            code = getattr(res, "code", None)
            error = getattr(res, "error", None) or "catalog update failed"
            if code == ErrorCode.CANCELLED.value:
                return Result.Err(ErrorCode.CANCELLED, error, item_id=item.id, name=item.name)
            return Result.Err(ErrorCode.UPDATE_FAILED, error, item_id=item.id, name=item.name, cause=code)
        return Result.Ok(item)

    async def correct(self, item: MediaItem, cancel: CancelSignal | None = None) -> Result[CorrectionOutcome]:
        """Evaluate, apply and persist one item."""
        try:
            evaluated = await asyncio.to_thread(self.evaluate, item)
        except Exception as exc:
            return Result.Err(ErrorCode.UNEXPECTED_FAILURE, str(exc), item_id=item.id, name=item.name)
        if not evaluated.ok or evaluated.data is None:
            return Result.Err(evaluated.code, evaluated.error or "evaluation failed", **evaluated.meta)

        decision = evaluated.data
        if not decision.should_fix:
            return Result.Ok(CorrectionOutcome(item.id, item.name, fixed=False, reason=decision.reason))

        old = self.apply(item, decision)
        saved = await self.persist(item, cancel)
        if not saved.ok:
            return Result.Err(saved.code, saved.error or "update failed", **saved.meta)
        return Result.Ok(
            CorrectionOutcome(
                item.id,
                item.name,
                fixed=True,
                old_timestamp=old,
                new_timestamp=item.date_created,
            )
        )
