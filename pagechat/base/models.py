"""Public surface for the engine's data models.

Dataclasses and enums live in ``models_parts``; this module re-exports them
under one stable import path.
"""

from .models_parts.session_state import SessionState, TurnStatus
from .models_parts.turn import Role, Turn, next_turn_id
from .models_parts.page_context import PageContext
from .models_parts.payload import ChatMessage, ChatPayload, CompletionEnvelope

__all__ = [
    "SessionState",
    "TurnStatus",
    "Role",
    "Turn",
    "next_turn_id",
    "PageContext",
    "ChatMessage",
    "ChatPayload",
    "CompletionEnvelope",
]
