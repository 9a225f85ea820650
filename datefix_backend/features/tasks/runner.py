"""
Background execution of registered tasks (one run per task key at a time).
"""
from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any

from ...shared import (
    ErrorCode,
    Result,
    format_timestamp,
    get_logger,
    log_structured,
    run_id_var,
    sanitize_error_message,
)
from .base import ScheduledTask, describe_task

logger = get_logger(__name__)


@dataclass
class _TaskRun:
    run_id: str
    cancel: threading.Event = field(default_factory=threading.Event)
    task: asyncio.Task | None = None
    status: dict[str, Any] = field(default_factory=dict)


class TaskRunner:
    """
    Starts tasks in the background, tracks progress and keeps the last
    result per task key.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, ScheduledTask] = {}
        self._runs: dict[str, _TaskRun] = {}
        self._lock = asyncio.Lock()

    def register(self, task: ScheduledTask) -> None:
        self._tasks[task.key] = task

    def get(self, key: str) -> ScheduledTask | None:
        return self._tasks.get(key)

    def list_tasks(self) -> list[dict[str, Any]]:
        out = []
        for key, task in self._tasks.items():
            info = describe_task(task)
            info["status"] = self._status_payload(key)
            out.append(info)
        return out

    def _status_payload(self, key: str) -> dict[str, Any]:
        run = self._runs.get(key)
        if run is None:
            return {"state": "idle", "running": False}
        status = dict(run.status)
        status["running"] = bool(run.task and not run.task.done())
        return status

    def get_status(self, key: str) -> Result[dict[str, Any]]:
        if key not in self._tasks:
            return Result.Err(ErrorCode.NOT_FOUND, f"Unknown task: {key}")
        return Result.Ok(self._status_payload(key))

    async def start(self, key: str) -> Result[dict[str, Any]]:
        task = self._tasks.get(key)
        if task is None:
            return Result.Err(ErrorCode.NOT_FOUND, f"Unknown task: {key}")

        async with self._lock:
            current = self._runs.get(key)
            if current and current.task and not current.task.done():
                return Result.Err(ErrorCode.ALREADY_RUNNING, f"{task.name} is already running", status=self._status_payload(key))

            run = _TaskRun(run_id=uuid.uuid4().hex[:8])
            run.status = {
                "state": "running",
                "run_id": run.run_id,
                "progress": 0.0,
                "started_at": format_timestamp(),
                "finished_at": None,
                "result": None,
                "last_error": None,
            }
            self._runs[key] = run
            run.task = asyncio.create_task(self._execute(task, run))
            logger.info("Started %s (run %s)", task.name, run.run_id)
            return Result.Ok({"started": True, "status": self._status_payload(key)})

    async def cancel(self, key: str) -> Result[dict[str, Any]]:
        if key not in self._tasks:
            return Result.Err(ErrorCode.NOT_FOUND, f"Unknown task: {key}")
        run = self._runs.get(key)
        if run is None or run.task is None or run.task.done():
            return Result.Ok({"cancelled": False, "status": self._status_payload(key)})
        run.cancel.set()
        logger.info("Cancellation requested for %s (run %s)", key, run.run_id)
        return Result.Ok({"cancelled": True, "status": self._status_payload(key)})

    async def wait(self, key: str, timeout: float | None = None) -> Result[dict[str, Any]]:
        """Wait for the current run of `key` to finish."""
        if key not in self._tasks:
            return Result.Err(ErrorCode.NOT_FOUND, f"Unknown task: {key}")
        run = self._runs.get(key)
        if run is not None and run.task is not None and not run.task.done():
            await asyncio.wait([run.task], timeout=timeout)
        return Result.Ok(self._status_payload(key))

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Signal every running task to stop and wait for them."""
        pending = []
        for run in self._runs.values():
            if run.task and not run.task.done():
                run.cancel.set()
                pending.append(run.task)
        if not pending:
            return
        _done, not_done = await asyncio.wait(pending, timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            await asyncio.wait(not_done, timeout=1.0)

    async def _execute(self, task: ScheduledTask, run: _TaskRun) -> None:
        token = run_id_var.set(run.run_id)

        def _progress(percent: float) -> None:
            run.status["progress"] = round(float(percent), 2)

        try:
            res = await task.execute(_progress, run.cancel)
            if res.ok:
                data = res.data
                payload = data.to_dict() if hasattr(data, "to_dict") else data
                cancelled = bool(getattr(data, "cancelled", False)) or run.cancel.is_set()
                run.status.update(state="cancelled" if cancelled else "completed", result=payload)
            else:
                run.status.update(state="failed", last_error=res.error, code=res.code)
                logger.error("%s failed: %s", task.name, res.error)
        except asyncio.CancelledError:
            run.status.update(state="cancelled")
            raise
        except Exception as exc:
            run.status.update(state="failed", last_error=sanitize_error_message(exc, "Task failed"))
            logger.error("%s crashed: %s", task.name, exc, exc_info=True)
        finally:
            run.status["finished_at"] = format_timestamp()
            log_structured(
                logger,
                logging.INFO,
                "task_finished",
                task=task.key,
                run_id=run.run_id,
                state=run.status.get("state"),
                progress=run.status.get("progress"),
            )
            run_id_var.reset(token)
