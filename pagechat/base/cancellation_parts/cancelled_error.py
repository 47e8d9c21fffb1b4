"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
of an in-flight stream. Distinct from ``asyncio.CancelledError`` so transport
code can tell a user/session cancellation apart from task teardown.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation observes a cancelled token.

    Session code maps it to a non-error terminal turn rather than surfacing
    it as a failure.
    """


__all__ = ["CancelledError"]
