"""pagechat package

Client-side streaming engine for a page-aware chat copilot.

Purpose:
    Consume an event-stream text-generation endpoint, assemble deltas into a
    stable assistant turn, guard the stream with connect and stall timeouts,
    continue a reply once when it looks cut off, and build every outbound
    payload from a bounded conversation history plus the viewed page.

Public API (re-exported):
    - Version: ``__version__``
    - Engine: :class:`SessionController`, :class:`ConversationContext`
    - Transport: :class:`UpstreamClient`
    - Models: :class:`Turn`, :class:`PageContext`, :class:`ChatPayload`
    - Errors: :class:`ErrorCode`, :class:`TurnError`, :class:`SessionBusyError`

The wired-up conversation facade lives in :mod:`pagechat.service`.
"""

from .base import (
    ChatPayload,
    ConversationContext,
    ErrorCode,
    PageContext,
    SessionBusyError,
    SessionController,
    SessionState,
    Turn,
    TurnError,
    UpstreamClient,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ChatPayload",
    "ConversationContext",
    "ErrorCode",
    "PageContext",
    "SessionBusyError",
    "SessionController",
    "SessionState",
    "Turn",
    "TurnError",
    "UpstreamClient",
]
