"""Single-shot wall-clock timers for the session controller.

A :class:`Watchdog` wraps ``loop.call_later``. The session owns two of them:
the connect timeout (time to first byte) and the stall watchdog (gap between
deltas, re-armed on every delta). Both observe the turn's cancellation token
so one ``cancel()`` stops everything.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from ..cancellation import CancellationToken
from ..logging import get_logger

_logger = get_logger("pagechat.streaming.watchdog")


class Watchdog:
    """Re-armable single-shot timer bound to the running event loop.

    Parameters:
        name: Label used in logs (``"connect"`` or ``"stall"``).
        timeout_seconds: Delay before ``on_fire`` runs; ``<= 0`` disables the
            timer entirely.
        on_fire: Zero-argument callback invoked on the loop thread.
        token: Optional token; cancelling it cancels the timer.
    """

    def __init__(
        self,
        name: str,
        timeout_seconds: float,
        on_fire: Callable[[], None],
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.name = name
        self.timeout_seconds = timeout_seconds
        self._on_fire = on_fire
        self._handle: Optional[asyncio.TimerHandle] = None
        self._fired = False
        self._disposed = False
        if token is not None:
            token.add_callback(lambda _reason: self.dispose())

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def enabled(self) -> bool:
        return self.timeout_seconds > 0

    def arm(self) -> None:
        """Schedule the timer, replacing any pending schedule."""
        self._clear()
        if self._disposed or not self.enabled:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.timeout_seconds, self._fire)

    def reset(self) -> None:
        """Re-arm from now (called on every delta for the stall watchdog)."""
        self.arm()

    def cancel(self) -> None:
        """Cancel the pending schedule (no-op when not armed)."""
        self._clear()

    def dispose(self) -> None:
        """Cancel and refuse any later `arm` (token cancelled)."""
        self._disposed = True
        self._clear()

    def _clear(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._disposed:
            return
        self._fired = True
        _logger.debug("watchdog %s fired after %.3fs", self.name, self.timeout_seconds)
        try:
            self._on_fire()
        except Exception:  # timer callbacks run on the loop; never let them escape
            _logger.log(logging.ERROR, "watchdog %s callback failed", self.name, exc_info=True)


__all__ = ["Watchdog"]
