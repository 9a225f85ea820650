import logging
from datetime import datetime, timedelta, timezone

import pytest

from datefix_backend.shared import (
    ErrorCode,
    ItemKind,
    Result,
    format_timestamp,
    get_logger,
    parse_item_kinds,
    parse_timestamp,
    run_id_var,
    sanitize_error_message,
    to_utc,
)
from datefix_backend.utils import parse_bool
from datefix_shared.log import CorrelationFilter, EmojiFormatter


def test_result_helpers():
    ok = Result.Ok(2, source="test")
    assert ok.map(lambda v: v * 3).data == 6
    assert ok.map(lambda v: v * 3).meta == {"source": "test"}
    err = Result.Err(ErrorCode.NOT_FOUND, "nope")
    assert err.code == "NOT_FOUND"
    assert err.map(lambda v: v * 3) is err
    assert err.unwrap_or(7) == 7
    with pytest.raises(ValueError):
        err.unwrap()


def test_timestamp_round_trip_in_utc():
    parsed = parse_timestamp("2021-03-04T12:00:00+02:00")
    assert parsed == datetime(2021, 3, 4, 10, 0, tzinfo=timezone.utc)
    assert format_timestamp(parsed) == "2021-03-04T10:00:00Z"
    assert parse_timestamp("2000-01-01T00:00:00Z").tzinfo == timezone.utc
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")


def test_to_utc_naive_and_offset():
    assert to_utc(datetime(2000, 1, 1)).tzinfo == timezone.utc
    shifted = to_utc(datetime(2000, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=1))))
    assert shifted == datetime(2000, 1, 1, tzinfo=timezone.utc)


def test_parse_item_kinds():
    assert parse_item_kinds("movie, Episode,,movie") == (ItemKind.MOVIE, ItemKind.EPISODE)
    assert parse_item_kinds("") == ()
    with pytest.raises(ValueError):
        parse_item_kinds("movie,podcast")


def test_parse_bool():
    assert parse_bool("yes") is True
    assert parse_bool("disabled", True) is False
    assert parse_bool("maybe", True) is True
    assert parse_bool(0, True) is False


def test_sanitize_error_message_masks_paths():
    msg = sanitize_error_message(OSError("cannot read /srv/media/movie.mkv"), "Probe failed")
    assert msg.startswith("Probe failed: ")
    assert "/srv/media" not in msg
    assert sanitize_error_message(None, "Probe failed") == "Probe failed"


def test_logger_namespace_and_run_id():
    logger = get_logger("datefix_backend.features.datefix.batch")
    assert logger.name == "datefix.features.datefix.batch"

    record = logging.LogRecord(logger.name, logging.INFO, __file__, 1, "hello", (), None)
    token = run_id_var.set("abc123")
    try:
        CorrelationFilter().filter(record)
    finally:
        run_id_var.reset(token)
    text = EmojiFormatter().format(record)
    assert "[abc123]" in text
    assert text.endswith("hello")


def test_sanitize_error_message_keeps_masked_detail_without_debug(monkeypatch):
    from datefix_shared import errors as errors_mod

    monkeypatch.setattr(errors_mod, "_DEBUG_MODE", False)
    msg = errors_mod.sanitize_error_message(RuntimeError("disk full\nat /var/lib/x " + "y" * 300), "Save failed")

    assert msg.startswith("Save failed: disk full at [path]")
    assert "\n" not in msg
    assert len(msg) == len("Save failed: ") + 200
