"""Short user-facing messages for each error code."""
from __future__ import annotations

from typing import Dict

from .error_code import ErrorCode

_MESSAGES: Dict[ErrorCode, str] = {
    ErrorCode.BUSY: "A reply is already in progress.",
    ErrorCode.CONNECT_TIMEOUT: "Connection timed out. Please try again.",
    ErrorCode.RATE_LIMITED: "Rate limited. Please wait a moment.",
    ErrorCode.UPSTREAM_UNAVAILABLE: "AI model loading. Try again in 20s.",
    ErrorCode.UPSTREAM_ERROR: "Server error. Try again later.",
    ErrorCode.OFFLINE: "Could not reach the server. Check your connection.",
    ErrorCode.UNKNOWN: "Connection error. Try again.",
}


def user_message(code: ErrorCode, status: int | None = None) -> str:
    """Return the message shown in place of a reply that failed with ``code``.

    Non-500 upstream failures get the generic backend wording.
    """
    if code is ErrorCode.UPSTREAM_ERROR and status is not None and status != 500:
        return "Backend error. Try again later."
    return _MESSAGES.get(code, _MESSAGES[ErrorCode.UNKNOWN])


__all__ = ["user_message"]
