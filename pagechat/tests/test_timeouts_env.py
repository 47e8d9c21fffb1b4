from __future__ import annotations

from pagechat.base.timeouts import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_STALL_TIMEOUT_SECONDS,
    get_timeout_config,
)


def test_defaults(monkeypatch):
    for name in ("CONNECT", "STALL", "HTTP"):
        monkeypatch.delenv(f"PAGECHAT_TIMEOUT_{name}_SECONDS", raising=False)
    cfg = get_timeout_config()
    assert cfg.connect_timeout_seconds == DEFAULT_CONNECT_TIMEOUT_SECONDS == 15.0  # nosec B101
    assert cfg.stall_timeout_seconds == DEFAULT_STALL_TIMEOUT_SECONDS == 12.0  # nosec B101
    assert cfg.http_timeout_seconds == DEFAULT_HTTP_TIMEOUT_SECONDS  # nosec B101


def test_env_overrides_and_invalid_values(monkeypatch):
    monkeypatch.setenv("PAGECHAT_TIMEOUT_CONNECT_SECONDS", "2.5")
    monkeypatch.setenv("PAGECHAT_TIMEOUT_STALL_SECONDS", "-1")
    monkeypatch.setenv("PAGECHAT_TIMEOUT_HTTP_SECONDS", "abc")
    cfg = get_timeout_config()
    assert cfg.connect_timeout_seconds == 2.5  # nosec B101
    assert cfg.stall_timeout_seconds == DEFAULT_STALL_TIMEOUT_SECONDS  # nosec B101
    assert cfg.http_timeout_seconds == DEFAULT_HTTP_TIMEOUT_SECONDS  # nosec B101
    assert get_timeout_config() is cfg  # nosec B101
