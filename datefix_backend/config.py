"""
Configuration for DateCreated Fixer.

Every knob is read once at import time from `DATEFIX_*` environment variables.
"""
import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from datefix_shared.time import parse_timestamp
from datefix_shared.types import MEDIA_KINDS, ItemKind, parse_item_kinds

from .utils import env_bool

logger = logging.getLogger(__name__)


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_float(default: float, *names: str, min_value: float | None = None, max_value: float | None = None) -> float:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid float for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_bool(default: bool, *names: str) -> bool:
    for name in names:
        if name and name in os.environ:
            return env_bool(name, default)
    return default


def _env_timestamp(default: datetime, *names: str) -> datetime:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        return parse_timestamp(raw)
    except ValueError:
        logger.warning("Invalid timestamp for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default


def _env_kinds(default: tuple[ItemKind, ...], *names: str) -> tuple[ItemKind, ...]:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        kinds = parse_item_kinds(raw)
    except ValueError:
        logger.warning("Invalid item kinds for %s=%r, using default", names[0] if names else "<unknown>", raw)
        return default
    return kinds or default


# Timestamps on or before this instant are the well-known epoch bug value.
DEFAULT_BAD_DATE_THRESHOLD = datetime(2000, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
BAD_DATE_THRESHOLD = _env_timestamp(DEFAULT_BAD_DATE_THRESHOLD, "DATEFIX_BAD_DATE_THRESHOLD")
# Coarse batch pre-filter: only items whose year is on/before this are checked.
BAD_DATE_YEAR = BAD_DATE_THRESHOLD.year

# Batch reconciler
BATCH_CONCURRENCY = _env_int(16, "DATEFIX_BATCH_CONCURRENCY", min_value=1, max_value=256)
PROGRESS_REPORT_EVERY = _env_int(500, "DATEFIX_PROGRESS_EVERY", min_value=1, max_value=1_000_000)
BATCH_ITEM_KINDS = _env_kinds(MEDIA_KINDS, "DATEFIX_ITEM_KINDS")

# Reactive corrector
REACTIVE_ENABLED = _env_bool(True, "DATEFIX_ENABLE_REACTIVE")
STOP_DRAIN_TIMEOUT_S = _env_float(10.0, "DATEFIX_STOP_DRAIN_TIMEOUT", min_value=0.0, max_value=600.0)

# Catalog storage
DATA_DIR_PATH = Path(_env_raw("DATEFIX_DATA_DIR", default=str(Path.cwd() / "_datefix")) or "_datefix").expanduser()
CATALOG_DB_PATH = Path(_env_raw("DATEFIX_CATALOG_DB", default=str(DATA_DIR_PATH / "catalog.sqlite")) or "").expanduser()
CATALOG_DB = str(CATALOG_DB_PATH)
DB_TIMEOUT = _env_float(30.0, "DATEFIX_DB_TIMEOUT", min_value=1.0, max_value=300.0)

# HTTP host surface
HTTP_HOST = _env_raw("DATEFIX_HOST", default="127.0.0.1") or "127.0.0.1"
HTTP_PORT = _env_int(8199, "DATEFIX_PORT", min_value=1, max_value=65535)


def initialize_directories() -> None:
    """Create the data directory holding the catalog database."""
    os.makedirs(CATALOG_DB_PATH.parent, exist_ok=True)
