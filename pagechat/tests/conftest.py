"""Pytest configuration for the pagechat test suite.

Provides small-timeout configurations for watchdog scenarios and a capture
fixture attached to the shared ``pagechat`` logger (it does not propagate to
the root logger, so ``caplog`` would miss its records).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List

import pytest

from pagechat.base.logging import BASE_LOGGER_NAME, get_logger
from pagechat.base.timeouts import TimeoutConfig


class _EventRecorder(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def events(self) -> List[Dict[str, Any]]:
        """Return the decoded JSON payloads of structured events."""
        out: List[Dict[str, Any]] = []
        for record in self.records:
            try:
                payload = json.loads(record.getMessage())
            except ValueError:
                continue
            if isinstance(payload, dict) and "event" in payload:
                out.append(payload)
        return out

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events() if e["event"] == event]


@pytest.fixture()
def log_events() -> Iterator[_EventRecorder]:
    """Capture every record reaching the ``pagechat`` logger at DEBUG."""
    base = get_logger(BASE_LOGGER_NAME)
    recorder = _EventRecorder()
    previous = base.level
    base.setLevel(logging.DEBUG)
    base.addHandler(recorder)
    try:
        yield recorder
    finally:
        base.removeHandler(recorder)
        base.setLevel(previous)


@pytest.fixture()
def fast_timeouts() -> TimeoutConfig:
    """Timeouts small enough for watchdog scenarios to run in milliseconds."""
    return TimeoutConfig(connect_timeout_seconds=0.2, stall_timeout_seconds=0.1, http_timeout_seconds=1.0)


@pytest.fixture()
def page_payload() -> Dict[str, str]:
    return {
        "title": "Repo X",
        "url": "u",
        "textContent": "e",
        "mode": "GitHub Analysis",
    }
