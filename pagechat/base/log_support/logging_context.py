"""Structured logging context object for session events.

This module defines :class:`LogContext`, a dataclass carrying the correlation
fields shared by every event of one conversation session (session id, the
active turn id and the page mode) plus free-form extras. ``to_dict`` merges
the ``extra`` mapping and prunes ``None`` values for clean structured output.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for session logging events."""

    session_id: Optional[str] = None
    turn_id: Optional[int] = None
    mode: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}

    def for_turn(self, turn_id: int) -> "LogContext":
        """Return a copy bound to ``turn_id`` (extras are shallow-copied)."""
        return LogContext(
            session_id=self.session_id,
            turn_id=turn_id,
            mode=self.mode,
            extra=dict(self.extra),
        )


__all__ = ["LogContext"]
