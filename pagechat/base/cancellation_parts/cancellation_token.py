"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class used by the session controller to stop
the network task and both watchdog timers through one handle. Besides polling
(``raise_if_cancelled``) the token supports push-style observers registered
with ``add_callback``; they run exactly once, on the thread/loop that calls
``cancel``.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List, Optional

from ..logging import get_logger
from .state import State
from .cancelled_error import CancelledError

_logger = get_logger("pagechat.cancellation")

CancelCallback = Callable[[Optional[str]], None]


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Child tokens inherit cancellation when the parent is cancelled. Callbacks
    registered after cancellation are invoked immediately.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[CancelCallback] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation, run callbacks, cascade to children."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            self._run_callback(callback, reason)
        for child in children:
            child.cancel(reason)

    def add_callback(self, callback: CancelCallback) -> None:
        """Register ``callback(reason)`` to run when the token is cancelled."""
        with self._lock:
            if not self._state.cancelled:
                self._callbacks.append(callback)
                return
            reason = self._state.reason
        self._run_callback(callback, reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    @staticmethod
    def _run_callback(callback: CancelCallback, reason: str | None) -> None:
        try:
            callback(reason)
        except Exception:  # a failing observer must not block the others
            _logger.exception("cancellation callback failed")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken"]
