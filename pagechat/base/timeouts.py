"""Unified timeout configuration for the streaming session.

This module centralizes the wall-clock bounds the session controller enforces
while a turn is in flight. Both values are single-shot timers owned by the
controller (see :mod:`pagechat.base.streaming.watchdog`); this module only
supplies the numbers.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values in seconds.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use (and again whenever the override variables change). Supported
    environment variables (all optional):
        PAGECHAT_TIMEOUT_CONNECT_SECONDS
        PAGECHAT_TIMEOUT_STALL_SECONDS
        PAGECHAT_TIMEOUT_HTTP_SECONDS

Design Constraints
------------------
1. No hard-coded ad-hoc timeouts outside this module.
2. Avoid per-call env parsing (cache after first read).
3. Invalid or non-positive overrides fall back to the defaults.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

DEFAULT_CONNECT_TIMEOUT_SECONDS = 15.0
DEFAULT_STALL_TIMEOUT_SECONDS = 12.0
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0

_ENV_VARS = (
    "PAGECHAT_TIMEOUT_CONNECT_SECONDS",
    "PAGECHAT_TIMEOUT_STALL_SECONDS",
    "PAGECHAT_TIMEOUT_HTTP_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Bound on time-to-first-byte for a stream
            request (response headers).
        stall_timeout_seconds: Maximum gap between two deltas once the
            stream is open. Reset on every delta.
        http_timeout_seconds: Baseline timeout for the underlying HTTP client
            and for non-streaming calls.
    """

    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    stall_timeout_seconds: float = DEFAULT_STALL_TIMEOUT_SECONDS
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Parse an environment variable as a positive float.

    Returns ``default`` if the variable is unset, not a valid float, or not
    positive.
    """
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`.

    The cache is refreshed when any of the override variables change so tests
    can adjust values at runtime with ``monkeypatch.setenv``.
    """
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_VARS)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED

    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(
            "PAGECHAT_TIMEOUT_CONNECT_SECONDS", DEFAULT_CONNECT_TIMEOUT_SECONDS
        ),
        stall_timeout_seconds=_parse_env_float(
            "PAGECHAT_TIMEOUT_STALL_SECONDS", DEFAULT_STALL_TIMEOUT_SECONDS
        ),
        http_timeout_seconds=_parse_env_float(
            "PAGECHAT_TIMEOUT_HTTP_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "DEFAULT_CONNECT_TIMEOUT_SECONDS",
    "DEFAULT_STALL_TIMEOUT_SECONDS",
    "DEFAULT_HTTP_TIMEOUT_SECONDS",
]
