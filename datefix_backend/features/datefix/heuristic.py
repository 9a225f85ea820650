"""
Decide whether a creation timestamp is bad and whether a file's
modification time is an acceptable replacement.

Pure functions: the caller stats the file once and passes the facts in.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ...config import BAD_DATE_THRESHOLD
from ...shared import SkipReason, to_utc, utc_now


@dataclass(frozen=True)
class CorrectionDecision:
    should_fix: bool
    new_timestamp: datetime | None = None
    reason: SkipReason | None = None

    @classmethod
    def fix(cls, new_timestamp: datetime) -> "CorrectionDecision":
        return cls(should_fix=True, new_timestamp=new_timestamp)

    @classmethod
    def skip(cls, reason: SkipReason) -> "CorrectionDecision":
        return cls(should_fix=False, reason=reason)


def is_bad_timestamp(value: datetime, threshold: datetime = BAD_DATE_THRESHOLD) -> bool:
    """True when `value` is on or before the epoch-bug threshold."""
    return to_utc(value) <= to_utc(threshold)


def is_acceptable_candidate(
    candidate: datetime,
    now: datetime | None = None,
    threshold: datetime = BAD_DATE_THRESHOLD,
) -> bool:
    """True when `threshold < candidate <= now`."""
    candidate = to_utc(candidate)
    now = to_utc(now) if now is not None else utc_now()
    return to_utc(threshold) < candidate <= now


def decide(
    date_created: datetime,
    file_exists: bool,
    last_modified: datetime | None,
    *,
    now: datetime | None = None,
    threshold: datetime = BAD_DATE_THRESHOLD,
) -> CorrectionDecision:
    """
    Combine the checks: fix only a bad timestamp, backed by an existing file
    whose mtime is inside the acceptable window.
    """
    if not is_bad_timestamp(date_created, threshold):
        return CorrectionDecision.skip(SkipReason.NOT_BAD)
    if not file_exists or last_modified is None:
        return CorrectionDecision.skip(SkipReason.FILE_MISSING)
    if not is_acceptable_candidate(last_modified, now=now, threshold=threshold):
        return CorrectionDecision.skip(SkipReason.TIMESTAMP_INVALID)
    return CorrectionDecision.fix(to_utc(last_modified))
