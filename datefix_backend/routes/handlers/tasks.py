"""
Task endpoints: list, inspect, run and cancel manual tasks.
"""
from aiohttp import web

from ...shared import ErrorCode, Result, get_logger
from ..core import _json_response, _require_services

logger = get_logger(__name__)


async def _task_runner():
    svc, error_result = await _require_services()
    if error_result:
        return None, error_result
    runner = (svc or {}).get("tasks")
    if runner is None:
        return None, Result.Err(ErrorCode.SERVICE_UNAVAILABLE, "Task runner unavailable")
    return runner, None


def register_task_routes(routes: web.RouteTableDef) -> None:
    @routes.get("/datefix/tasks")
    async def list_tasks(_request: web.Request) -> web.Response:
        runner, error_result = await _task_runner()
        if error_result:
            return _json_response(error_result)
        return _json_response(Result.Ok(runner.list_tasks()))

    @routes.get("/datefix/tasks/{key}")
    async def get_task(request: web.Request) -> web.Response:
        runner, error_result = await _task_runner()
        if error_result:
            return _json_response(error_result)
        return _json_response(runner.get_status(request.match_info["key"]))

    @routes.post("/datefix/tasks/{key}/run")
    async def run_task(request: web.Request) -> web.Response:
        runner, error_result = await _task_runner()
        if error_result:
            return _json_response(error_result)
        key = request.match_info["key"]
        logger.info("Run requested for task %s", key)
        return _json_response(await runner.start(key))

    @routes.post("/datefix/tasks/{key}/cancel")
    async def cancel_task(request: web.Request) -> web.Response:
        runner, error_result = await _task_runner()
        if error_result:
            return _json_response(error_result)
        return _json_response(await runner.cancel(request.match_info["key"]))
