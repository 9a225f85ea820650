"""
Core utilities for route handlers.
"""
from .response import _json_response
from .services import _require_services, set_services

__all__ = ["_json_response", "_require_services", "set_services"]
