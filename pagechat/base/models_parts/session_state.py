"""Session and turn status enumerations."""
from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle of a :class:`~pagechat.base.streaming.session.SessionController`.

    ``IDLE → CONNECTING → STREAMING → FINALIZING → IDLE``; hard failures pass
    through ``ERROR`` before ``FINALIZING``; cancellation returns straight to
    ``IDLE``.
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    ERROR = "error"

    @property
    def in_flight(self) -> bool:
        return self in (SessionState.CONNECTING, SessionState.STREAMING)


class TurnStatus(str, Enum):
    PENDING = "pending"
    STREAMING = "streaming"
    FINALIZED = "finalized"
    ERROR = "error"

    @property
    def terminal(self) -> bool:
        return self in (TurnStatus.FINALIZED, TurnStatus.ERROR)


__all__ = ["SessionState", "TurnStatus"]
