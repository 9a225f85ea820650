"""Shared utilities for DateCreated Fixer."""
from .errors import sanitize_error_message
from .log import get_logger, log_structured, log_success, run_id_var
from .result import Result
from .time import format_timestamp, from_epoch, parse_timestamp, timer, to_utc, utc_now
from .types import MEDIA_KINDS, ErrorCode, ItemKind, SkipReason, UpdateKind, parse_item_kinds

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "log_structured",
    "run_id_var",
    "utc_now",
    "to_utc",
    "from_epoch",
    "parse_timestamp",
    "format_timestamp",
    "timer",
    "ErrorCode",
    "ItemKind",
    "MEDIA_KINDS",
    "SkipReason",
    "UpdateKind",
    "parse_item_kinds",
    "sanitize_error_message",
]
