"""
Time utilities for UTC timestamps and performance measurement.
"""
from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalize to aware UTC. Naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def from_epoch(ts: float) -> datetime:
    """Aware UTC datetime from a POSIX timestamp (e.g. ``st_mtime``)."""
    return datetime.fromtimestamp(float(ts), tz=timezone.utc)


def parse_timestamp(raw: str) -> datetime:
    """
    Parse an ISO 8601 string into aware UTC.

    Accepts a trailing ``Z``. Raises ValueError on garbage.
    """
    text = str(raw or "").strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(text))


def format_timestamp(value: datetime | None = None) -> str:
    """
    Format as ISO 8601 UTC with a ``Z`` suffix.

    Args:
        value: Datetime to format (default: now)

    Returns:
        e.g. "2021-03-04T10:00:00Z"
    """
    if value is None:
        value = utc_now()
    return to_utc(value).isoformat().replace("+00:00", "Z")


@contextmanager
def timer(label: str, logger: logging.Logger | None = None) -> Iterator[None]:
    """
    Context manager for timing operations.

    Usage:
        with timer("catalog query", logger):
            await catalog.query_items(kinds)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        msg = f"{label} took {elapsed:.3f}s"
        if logger:
            logger.debug(msg)
        else:
            print(msg)
