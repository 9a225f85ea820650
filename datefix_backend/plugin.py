"""
Plugin descriptor reported to hosts.
"""
from __future__ import annotations

import uuid
from importlib import metadata
from typing import Any

PLUGIN_NAME = "DateCreated Fixer"
PLUGIN_ID = uuid.UUID("d8f3a1b2-4c5e-6f78-9a0b-c1d2e3f4a5b6")
PLUGIN_DESCRIPTION = (
    "Fixes invalid DateCreated values (2000-01-01 bug) on movies, episodes "
    "and audio by using the file's last modification time."
)
_DISTRIBUTION = "datefix"


def get_version() -> str:
    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def get_plugin_info() -> dict[str, Any]:
    return {
        "name": PLUGIN_NAME,
        "id": str(PLUGIN_ID),
        "description": PLUGIN_DESCRIPTION,
        "version": get_version(),
    }
