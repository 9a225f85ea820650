"""
aiohttp application wiring: build services on startup, dispose on cleanup.
"""
from __future__ import annotations

from aiohttp import web

from .deps import build_services, dispose_services
from .routes import register_all_routes
from .routes.core import set_services
from .shared import get_logger

logger = get_logger(__name__)

SERVICES_KEY: web.AppKey[dict] = web.AppKey("datefix_services", dict)


def create_app(db_path: str | None = None, *, reactive: bool | None = None) -> web.Application:
    app = web.Application()
    app.add_routes(register_all_routes())

    async def _on_startup(app: web.Application) -> None:
        res = await build_services(db_path, reactive=reactive)
        if not res.ok or res.data is None:
            raise RuntimeError(f"Failed to build services: {res.error}")
        app[SERVICES_KEY] = res.data
        set_services(res.data)

    async def _on_cleanup(app: web.Application) -> None:
        set_services(None)
        await dispose_services(app.get(SERVICES_KEY))

    app.on_startup.append(_on_startup)
    app.on_cleanup.append(_on_cleanup)
    return app
