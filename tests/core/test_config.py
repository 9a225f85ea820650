from datetime import datetime, timezone

from datefix_backend import config as config_mod
from datefix_backend.shared import ItemKind


def test_defaults():
    assert config_mod.DEFAULT_BAD_DATE_THRESHOLD == datetime(2000, 1, 1, tzinfo=timezone.utc)
    assert config_mod.BAD_DATE_YEAR == config_mod.BAD_DATE_THRESHOLD.year
    assert 1 <= config_mod.BATCH_CONCURRENCY <= 256


def test_env_int_clamps_and_falls_back(monkeypatch):
    monkeypatch.setenv("DATEFIX_TEST_INT", "999")
    assert config_mod._env_int(16, "DATEFIX_TEST_INT", min_value=1, max_value=256) == 256
    monkeypatch.setenv("DATEFIX_TEST_INT", "0")
    assert config_mod._env_int(16, "DATEFIX_TEST_INT", min_value=1, max_value=256) == 1
    monkeypatch.setenv("DATEFIX_TEST_INT", "lots")
    assert config_mod._env_int(16, "DATEFIX_TEST_INT", min_value=1) == 16
    monkeypatch.setenv("DATEFIX_TEST_INT", "   ")
    assert config_mod._env_int(16, "DATEFIX_TEST_INT") == 16


def test_env_float_and_bool(monkeypatch):
    monkeypatch.setenv("DATEFIX_TEST_FLOAT", "2.5")
    assert config_mod._env_float(10.0, "DATEFIX_TEST_FLOAT", min_value=0.0) == 2.5
    monkeypatch.setenv("DATEFIX_TEST_BOOL", "off")
    assert config_mod._env_bool(True, "DATEFIX_TEST_BOOL") is False
    monkeypatch.delenv("DATEFIX_TEST_BOOL")
    assert config_mod._env_bool(True, "DATEFIX_TEST_BOOL") is True


def test_env_timestamp(monkeypatch):
    default = config_mod.DEFAULT_BAD_DATE_THRESHOLD
    monkeypatch.setenv("DATEFIX_TEST_TS", "2001-01-01T00:00:00Z")
    assert config_mod._env_timestamp(default, "DATEFIX_TEST_TS") == datetime(2001, 1, 1, tzinfo=timezone.utc)
    monkeypatch.setenv("DATEFIX_TEST_TS", "not a date")
    assert config_mod._env_timestamp(default, "DATEFIX_TEST_TS") == default


def test_env_kinds(monkeypatch):
    default = (ItemKind.MOVIE,)
    monkeypatch.setenv("DATEFIX_TEST_KINDS", "Audio, episode,audio")
    assert config_mod._env_kinds(default, "DATEFIX_TEST_KINDS") == (ItemKind.AUDIO, ItemKind.EPISODE)
    monkeypatch.setenv("DATEFIX_TEST_KINDS", "movie,podcast")
    assert config_mod._env_kinds(default, "DATEFIX_TEST_KINDS") == default
