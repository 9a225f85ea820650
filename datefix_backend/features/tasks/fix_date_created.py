"""
"Fix DateCreated Values" task: the batch reconciler behind the task contract.
"""
from __future__ import annotations

from ...shared import Result
from ..catalog import CancelSignal
from ..datefix import BatchReconciler, BatchSummary
from .base import ProgressSink, TaskTriggerInfo


class FixDateCreatedTask:
    """Manual-only task; hosts run it on demand."""

    def __init__(self, reconciler: BatchReconciler):
        self.reconciler = reconciler

    @property
    def name(self) -> str:
        return "Fix DateCreated Values"

    @property
    def key(self) -> str:
        return "DateCreatedFixer"

    @property
    def description(self) -> str:
        return (
            "Fixes items with invalid DateCreated (2000-01-01) by setting them "
            "to the file's last modification time."
        )

    @property
    def category(self) -> str:
        return "Library"

    def get_default_triggers(self) -> list[TaskTriggerInfo]:
        return []

    async def execute(self, progress: ProgressSink, cancel: CancelSignal) -> Result[BatchSummary]:
        return await self.reconciler.run(progress=progress, cancel=cancel)
