import pytest

from datefix_backend import deps as deps_mod
from datefix_backend.shared import ErrorCode, Result


@pytest.mark.asyncio
async def test_services_fixture_builds_everything(services):
    assert set(services) == {"catalog", "probe", "corrector", "fixer", "reconciler", "tasks"}
    assert services["fixer"].is_running
    assert services["tasks"].get("DateCreatedFixer") is not None


@pytest.mark.asyncio
async def test_build_services_without_reactive(tmp_path):
    res = await deps_mod.build_services(str(tmp_path / "c.sqlite"), reactive=False)
    assert res.ok
    try:
        assert res.data["fixer"].is_running is False
        assert res.data["catalog"].item_added.subscriber_count == 0
    finally:
        await deps_mod.dispose_services(res.data)


@pytest.mark.asyncio
async def test_build_services_catalog_failure(monkeypatch, tmp_path):
    class _BadStore:
        def __init__(self, *_args, **_kwargs):
            pass

        async def open(self):
            return Result.Err(ErrorCode.DB_ERROR, "disk full")

    monkeypatch.setattr(deps_mod, "CatalogStore", _BadStore)
    res = await deps_mod.build_services(str(tmp_path / "c.sqlite"))

    assert res.ok is False
    assert res.code == "DB_ERROR"
    assert "disk full" in res.error


@pytest.mark.asyncio
async def test_dispose_continues_after_a_failing_service():
    closed = []

    class _Fixer:
        async def stop(self):
            raise RuntimeError("stuck")

    class _Tasks:
        async def shutdown(self):
            closed.append("tasks")

    class _Catalog:
        async def aclose(self):
            closed.append("catalog")

    await deps_mod.dispose_services({"fixer": _Fixer(), "tasks": _Tasks(), "catalog": _Catalog()})
    assert closed == ["tasks", "catalog"]


@pytest.mark.asyncio
async def test_dispose_none_is_noop():
    await deps_mod.dispose_services(None)
