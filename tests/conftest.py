import sys

import pytest_asyncio

from .repo_root import REPO_ROOT

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest_asyncio.fixture
async def services(tmp_path):
    from datefix_backend.deps import build_services, dispose_services

    db_path = str(tmp_path / "test_catalog.sqlite")
    svc_res = await build_services(db_path, reactive=True)
    assert svc_res.ok, svc_res.error
    svc = svc_res.data
    try:
        yield svc
    finally:
        await dispose_services(svc)
