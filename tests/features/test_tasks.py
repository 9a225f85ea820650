import asyncio

import pytest

from datefix_backend.features.datefix import BatchReconciler, ItemCorrector
from datefix_backend.features.tasks import FixDateCreatedTask, TaskRunner, TaskTriggerInfo, describe_task
from datefix_backend.shared import ErrorCode, Result
from tests.fakes import GOOD_MTIME, NOW, FakeCatalog, FakeProbe, make_item


def _task(catalog, probe, **kwargs):
    corrector = ItemCorrector(catalog, probe, clock=lambda: NOW)
    return FixDateCreatedTask(BatchReconciler(catalog, corrector, **kwargs))


def test_task_descriptor():
    task = _task(FakeCatalog(), FakeProbe())
    info = describe_task(task)
    assert info["name"] == "Fix DateCreated Values"
    assert info["key"] == "DateCreatedFixer"
    assert info["category"] == "Library"
    assert "2000-01-01" in info["description"]
    assert info["triggers"] == []


@pytest.mark.asyncio
async def test_task_execute_runs_the_batch():
    item = make_item("a")
    catalog = FakeCatalog([item])
    seen = []
    res = await _task(catalog, FakeProbe({item.path: GOOD_MTIME})).execute(seen.append, asyncio.Event())
    assert res.ok
    assert res.data.fixed == 1
    assert seen[-1] == 100.0


class _SlowTask:
    name = "Slow"
    key = "slow"
    description = "waits for cancel"
    category = "Test"

    def __init__(self):
        self.started = asyncio.Event()

    def get_default_triggers(self):
        return []

    async def execute(self, progress, cancel):
        self.started.set()
        progress(10.0)
        while not cancel.is_set():
            await asyncio.sleep(0.01)
        return Result.Ok({"stopped": True})


class _FailingTask(_SlowTask):
    key = "failing"

    async def execute(self, progress, cancel):
        raise RuntimeError("exploded at /secret/path/file.mkv")


@pytest.mark.asyncio
async def test_runner_completes_and_keeps_result():
    item = make_item("a")
    catalog = FakeCatalog([item])
    runner = TaskRunner()
    runner.register(_task(catalog, FakeProbe({item.path: GOOD_MTIME})))

    started = await runner.start("DateCreatedFixer")
    assert started.ok
    status = (await runner.wait("DateCreatedFixer", timeout=2.0)).data

    assert status["state"] == "completed"
    assert status["running"] is False
    assert status["progress"] == 100.0
    assert status["result"]["fixed"] == 1
    assert status["finished_at"]


@pytest.mark.asyncio
async def test_runner_rejects_second_start_while_running():
    runner = TaskRunner()
    slow = _SlowTask()
    runner.register(slow)

    assert (await runner.start("slow")).ok
    await slow.started.wait()
    again = await runner.start("slow")

    assert again.ok is False
    assert again.code == ErrorCode.ALREADY_RUNNING.value
    await runner.shutdown(timeout=1.0)


@pytest.mark.asyncio
async def test_runner_cancel_marks_run_cancelled():
    runner = TaskRunner()
    slow = _SlowTask()
    runner.register(slow)

    await runner.start("slow")
    await slow.started.wait()
    cancelled = await runner.cancel("slow")
    status = (await runner.wait("slow", timeout=2.0)).data

    assert cancelled.data["cancelled"] is True
    assert status["state"] == "cancelled"
    assert status["progress"] == 10.0


@pytest.mark.asyncio
async def test_runner_cancel_when_idle_is_a_noop():
    runner = TaskRunner()
    runner.register(_SlowTask())
    res = await runner.cancel("slow")
    assert res.ok
    assert res.data["cancelled"] is False
    assert res.data["status"]["state"] == "idle"


@pytest.mark.asyncio
async def test_runner_crash_is_reported_without_paths():
    runner = TaskRunner()
    runner.register(_FailingTask())

    await runner.start("failing")
    status = (await runner.wait("failing", timeout=2.0)).data

    assert status["state"] == "failed"
    assert "/secret/path" not in status["last_error"]


@pytest.mark.asyncio
async def test_runner_failed_result_is_reported():
    catalog = FakeCatalog()
    catalog.query_fails = True
    runner = TaskRunner()
    runner.register(_task(catalog, FakeProbe()))

    await runner.start("DateCreatedFixer")
    status = (await runner.wait("DateCreatedFixer", timeout=2.0)).data

    assert status["state"] == "failed"
    assert status["code"] == ErrorCode.DB_ERROR.value


@pytest.mark.asyncio
async def test_runner_unknown_key():
    runner = TaskRunner()
    assert (await runner.start("nope")).code == ErrorCode.NOT_FOUND.value
    assert (await runner.cancel("nope")).code == ErrorCode.NOT_FOUND.value
    assert runner.get_status("nope").code == ErrorCode.NOT_FOUND.value


def test_runner_lists_registered_tasks_idle():
    runner = TaskRunner()
    runner.register(_task(FakeCatalog(), FakeProbe()))
    listed = runner.list_tasks()
    assert [t["key"] for t in listed] == ["DateCreatedFixer"]
    assert listed[0]["status"] == {"state": "idle", "running": False}


def test_describe_task_serializes_triggers():
    class _Nightly(_SlowTask):
        def get_default_triggers(self):
            return [TaskTriggerInfo(type="daily", time_of_day="03:00")]

    info = describe_task(_Nightly())
    assert info["triggers"] == [{"type": "daily", "interval_seconds": None, "time_of_day": "03:00"}]
