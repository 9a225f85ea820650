"""
Service registry shared by route handlers.
"""
from typing import Any

from ...shared import ErrorCode, Result

_services: dict[str, Any] | None = None


def set_services(services: dict[str, Any] | None) -> None:
    global _services
    _services = services


async def _require_services() -> tuple[dict[str, Any] | None, Result | None]:
    """Return (services, None) or (None, error result) when not built yet."""
    if not _services:
        return None, Result.Err(ErrorCode.SERVICE_UNAVAILABLE, "Services are not initialized")
    return _services, None
