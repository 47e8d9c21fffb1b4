"""
Normalized turn error codes (taxonomy).

Values are lowercase snake_case and are part of the structured logging
contract.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Closed set of outcomes a turn can terminate with besides success.

    ``STALL_TIMEOUT``, ``CANCELLED``, ``MALFORMED_FRAME`` and
    ``CONTINUATION_FAILED`` are recorded for logging only; they never set the
    error flag on a turn.
    """

    BUSY = "busy"
    CONNECT_TIMEOUT = "connect_timeout"
    STALL_TIMEOUT = "stall_timeout"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_ERROR = "upstream_error"
    OFFLINE = "offline"
    CANCELLED = "cancelled"
    MALFORMED_FRAME = "malformed_frame"
    CONTINUATION_FAILED = "continuation_failed"
    UNKNOWN = "unknown"

    @property
    def is_soft(self) -> bool:
        """True for outcomes that finalize with partial content, unflagged."""
        return self in _SOFT_CODES


_SOFT_CODES = frozenset(
    {
        ErrorCode.STALL_TIMEOUT,
        ErrorCode.CANCELLED,
        ErrorCode.MALFORMED_FRAME,
        ErrorCode.CONTINUATION_FAILED,
    }
)


__all__ = ["ErrorCode"]
