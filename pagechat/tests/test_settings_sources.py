"""Settings merge order: defaults, config file, environment, overrides."""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from pagechat.config import ENV_FIELD_MAP, Settings, get_settings
from pagechat.config.defaults import DEFAULT_STREAM_URL


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("PAGECHAT_CONFIG_FILE", raising=False)
    for var in ENV_FIELD_MAP.values():
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    settings = get_settings()
    assert settings.stream_url == DEFAULT_STREAM_URL  # nosec B101
    limits = settings.context_limits()
    assert (limits.history_limit, limits.window_size, limits.continuation_window) == (40, 12, 4)  # nosec B101
    assert settings.max_continuations == 1  # nosec B101


def test_json_file_then_env_then_overrides(monkeypatch, tmp_path):
    cfg = tmp_path / "pagechat.json"
    cfg.write_text(json.dumps({"stream_url": "http://file/s", "history_limit": 60, "context_window": 16}), encoding="utf-8")
    monkeypatch.setenv("PAGECHAT_CONFIG_FILE", str(cfg))
    monkeypatch.setenv("PAGECHAT_HISTORY_LIMIT", "50")

    settings = get_settings({"stream_url": "http://override/s", "complete_url": None})

    assert settings.stream_url == "http://override/s"  # nosec B101
    assert settings.history_limit == 50  # nosec B101
    assert settings.context_window == 16  # nosec B101


def test_yaml_file_with_section(monkeypatch, tmp_path):
    cfg = tmp_path / "pagechat.yaml"
    cfg.write_text("pagechat:\n  stream_url: http://yaml/s\n  max_continuations: 2\n", encoding="utf-8")
    monkeypatch.setenv("PAGECHAT_CONFIG_FILE", str(cfg))
    settings = get_settings()
    assert settings.stream_url == "http://yaml/s" and settings.max_continuations == 2  # nosec B101


def test_missing_config_file_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("PAGECHAT_CONFIG_FILE", str(tmp_path / "absent.yaml"))
    assert get_settings().stream_url == DEFAULT_STREAM_URL  # nosec B101


def test_validation_errors():
    with pytest.raises(ValidationError):
        Settings(history_limit=5, context_window=6)
    with pytest.raises(ValidationError):
        get_settings({"history_limit": 0})


def test_timeouts_prefer_explicit_settings(monkeypatch):
    monkeypatch.setenv("PAGECHAT_TIMEOUT_CONNECT_SECONDS", "3")
    timeouts = Settings(stall_timeout_seconds=0.5).timeouts()
    assert timeouts.connect_timeout_seconds == 3.0  # nosec B101
    assert timeouts.stall_timeout_seconds == 0.5  # nosec B101
