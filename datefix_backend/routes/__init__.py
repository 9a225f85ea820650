"""
Route registration.
"""
from aiohttp import web

from .handlers import register_status_routes, register_task_routes


def register_all_routes() -> web.RouteTableDef:
    routes = web.RouteTableDef()
    register_status_routes(routes)
    register_task_routes(routes)
    return routes


__all__ = ["register_all_routes"]
