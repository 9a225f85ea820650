"""
Contract for manually triggered units of work.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from ...shared import Result
from ..catalog import CancelSignal

ProgressSink = Callable[[float], None]


@dataclass(frozen=True)
class TaskTriggerInfo:
    """When a host scheduler should run a task on its own."""

    type: str                       # "interval" | "daily" | "startup"
    interval_seconds: float | None = None
    time_of_day: str | None = None  # "HH:MM" for daily triggers


class ScheduledTask(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def key(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def category(self) -> str: ...

    def get_default_triggers(self) -> list[TaskTriggerInfo]: ...

    async def execute(self, progress: ProgressSink, cancel: CancelSignal) -> Result[Any]: ...


def describe_task(task: ScheduledTask) -> dict[str, Any]:
    return {
        "name": task.name,
        "key": task.key,
        "description": task.description,
        "category": task.category,
        "triggers": [vars(t) for t in task.get_default_triggers()],
    }
