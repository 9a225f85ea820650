"""
Plugin and reactive-corrector status.
"""
from aiohttp import web

from ...plugin import get_plugin_info
from ...shared import Result
from ..core import _json_response, _require_services


def register_status_routes(routes: web.RouteTableDef) -> None:
    async def _get_status(_request: web.Request) -> web.Response:
        svc, error_result = await _require_services()
        if error_result:
            return _json_response(error_result)
        data = {"plugin": get_plugin_info(), "reactive": None}
        fixer = (svc or {}).get("fixer")
        if fixer is not None:
            data["reactive"] = fixer.get_runtime_status()
        return _json_response(Result.Ok(data))

    routes.get("/datefix/status")(_get_status)
