"""Unified configuration layer.

Goals
-----
* Centralize defaults (endpoints, history bounds, timeouts).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by
       ``PAGECHAT_CONFIG_FILE``
    3. Environment variables
    4. In-code overrides passed to :func:`get_settings`
* Provide a single call site: ``get_settings()``.

Environment Variables
---------------------
PAGECHAT_STREAM_URL, PAGECHAT_COMPLETE_URL, PAGECHAT_HISTORY_LIMIT,
PAGECHAT_CONTEXT_WINDOW, PAGECHAT_MAX_CONTINUATIONS, plus the timeout
variables read by :mod:`pagechat.base.timeouts`.

External Config File
--------------------
JSON is tried first, then YAML::

    stream_url: https://example.test/api/chat/stream
    history_limit: 60
    context_window: 16
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..base.constants import (
    CONTEXT_WINDOW_SIZE,
    CONTINUATION_WINDOW_SIZE,
    HISTORY_LIMIT,
    MAX_CONTINUATIONS,
)
from ..base.context.limits import ContextLimits
from ..base.timeouts import TimeoutConfig, get_timeout_config
from .defaults import DEFAULT_COMPLETE_URL, DEFAULT_STREAM_URL


class Settings(BaseModel):
    """Resolved runtime settings."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    stream_url: str = DEFAULT_STREAM_URL
    complete_url: Optional[str] = DEFAULT_COMPLETE_URL
    history_limit: int = Field(default=HISTORY_LIMIT, ge=1)
    context_window: int = Field(default=CONTEXT_WINDOW_SIZE, ge=0)
    continuation_window: int = Field(default=CONTINUATION_WINDOW_SIZE, ge=0)
    max_continuations: int = Field(default=MAX_CONTINUATIONS, ge=0)
    connect_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    stall_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_windows(self) -> "Settings":
        if self.context_window > self.history_limit:
            raise ValueError("context_window cannot exceed history_limit")
        if self.continuation_window > self.history_limit:
            raise ValueError("continuation_window cannot exceed history_limit")
        return self

    def context_limits(self) -> ContextLimits:
        return ContextLimits(
            history_limit=self.history_limit,
            window_size=self.context_window,
            continuation_window=self.continuation_window,
        )

    def timeouts(self) -> TimeoutConfig:
        """Timeouts from the environment, with explicit settings taking precedence."""
        base = get_timeout_config()
        return TimeoutConfig(
            connect_timeout_seconds=self.connect_timeout_seconds or base.connect_timeout_seconds,
            stall_timeout_seconds=self.stall_timeout_seconds or base.stall_timeout_seconds,
            http_timeout_seconds=base.http_timeout_seconds,
        )


ENV_FIELD_MAP = {
    "stream_url": "PAGECHAT_STREAM_URL",
    "complete_url": "PAGECHAT_COMPLETE_URL",
    "history_limit": "PAGECHAT_HISTORY_LIMIT",
    "context_window": "PAGECHAT_CONTEXT_WINDOW",
    "max_continuations": "PAGECHAT_MAX_CONTINUATIONS",
}


def _load_external_config() -> Dict[str, Any]:
    path = os.getenv("PAGECHAT_CONFIG_FILE")
    if not path:
        return {}
    p = Path(path)
    if not p.is_file():
        return {}
    text = p.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    if not isinstance(data, dict):
        return {}
    section = data.get("pagechat")
    return section if isinstance(section, dict) else data


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, var in ENV_FIELD_MAP.items():
        val = os.getenv(var)
        if val is not None and val.strip():
            out[field] = val.strip()
    return out


def get_settings(overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """Return merged settings.

    Merge order (later wins): defaults -> config file -> env vars -> overrides.
    Values are validated by :class:`Settings`; invalid input raises
    ``pydantic.ValidationError``.
    """
    cfg: Dict[str, Any] = {}
    cfg |= _load_external_config()
    cfg |= _env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return Settings.model_validate(cfg)


__all__ = ["Settings", "get_settings", "ENV_FIELD_MAP"]
