"""
Error classification helpers mapping exceptions and HTTP statuses to
normalized :class:`ErrorCode` values.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_code import ErrorCode
from .turn_error import TurnError


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    408: ErrorCode.CONNECT_TIMEOUT,
    429: ErrorCode.RATE_LIMITED,
    500: ErrorCode.UPSTREAM_ERROR,
    502: ErrorCode.UPSTREAM_UNAVAILABLE,
    503: ErrorCode.UPSTREAM_UNAVAILABLE,
    504: ErrorCode.CONNECT_TIMEOUT,
}


def classify_status(status: int) -> ErrorCode:
    """Map a non-success HTTP status to an error code.

    Statuses without a dedicated entry fall back to ``UPSTREAM_ERROR``.
    """
    return _HTTP_STATUS_MAP.get(status, ErrorCode.UPSTREAM_ERROR)


def _extract_status(exc: BaseException) -> Optional[int]:
    """Extract an HTTP status from ``exc.status_code``/``exc.status``/``exc.response``."""
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ``TurnError`` passthrough.
        2. Timeouts (httpx, builtin, asyncio).
        3. Connectivity failures (offline / unreachable).
        4. HTTP status mapping.
        5. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, TurnError):
        return exc.code
    if isinstance(exc, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.CONNECT_TIMEOUT
    if isinstance(exc, (httpx.ConnectError, ConnectionError, OSError)):
        return ErrorCode.OFFLINE
    status = _extract_status(exc)
    if status is not None and status >= 400:
        return classify_status(status)
    return ErrorCode.UNKNOWN


__all__ = [
    "classify_exception",
    "classify_status",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
