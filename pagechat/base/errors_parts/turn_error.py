"""
Structured turn error exception types.

``TurnError`` is raised by transports and caught by the session controller,
which converts it into a terminal turn. ``SessionBusyError`` is the only
exception a caller of the session ever sees.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class TurnError(Exception):
    """A classified failure of one stream request.

    Attributes:
        code: Normalized :class:`ErrorCode`.
        message: Short human-readable message shown as turn content.
        status: HTTP status code when the failure came from a response.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    status: Optional[int] = None
    raw: Optional[BaseException] = None

    def __str__(self) -> str:
        status = f" ({self.status})" if self.status is not None else ""
        return f"{self.code.value}{status}: {self.message}"


class SessionBusyError(RuntimeError):
    """Raised synchronously when a turn is started while another is in flight."""

    code = ErrorCode.BUSY

    def __init__(self, active_turn_id: Optional[int] = None) -> None:
        self.active_turn_id = active_turn_id
        super().__init__(f"session busy (active turn {active_turn_id})")


__all__ = ["TurnError", "SessionBusyError"]
