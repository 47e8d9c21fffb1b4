"""Base shared constants for the streaming engine and context manager.

Central location to avoid scattering magic strings and thresholds. The
numeric limits are empirically tuned defaults; callers override them through
``ContextLimits``, ``TruncationRules`` and ``ContinuationPolicy`` rather than
editing these values.
"""
from __future__ import annotations

# Conversation history bounds
HISTORY_LIMIT = 40              # finalized turns retained per conversation
CONTEXT_WINDOW_SIZE = 12        # most recent turns sent with each payload
CONTINUATION_WINDOW_SIZE = 4    # turns sent with a continuation payload
MAX_EXCERPT_CHARS = 8000        # page excerpt cap
RECAP_THRESHOLD = 20            # offer a recap every N recorded turns

# Truncation heuristic
TRUNCATION_MIN_LENGTH = 20
TRUNCATION_MIN_FRAGMENT = 5
MAX_CONTINUATIONS = 1

# Follow-up detection
FOLLOW_UP_WORD_LIMIT = 8
FOLLOW_UP_MIN_HISTORY = 2

# Wire protocol
DONE_SENTINEL = "[DONE]"
DATA_FIELD_PREFIX = "data:"

DEFAULT_MODE = "General Analysis"

CONTINUATION_INSTRUCTION = (
    "Continue naturally from where you stopped. Do not repeat anything already said."
)

__all__ = [
    "HISTORY_LIMIT",
    "CONTEXT_WINDOW_SIZE",
    "CONTINUATION_WINDOW_SIZE",
    "MAX_EXCERPT_CHARS",
    "RECAP_THRESHOLD",
    "TRUNCATION_MIN_LENGTH",
    "TRUNCATION_MIN_FRAGMENT",
    "MAX_CONTINUATIONS",
    "FOLLOW_UP_WORD_LIMIT",
    "FOLLOW_UP_MIN_HISTORY",
    "DONE_SENTINEL",
    "DATA_FIELD_PREFIX",
    "DEFAULT_MODE",
    "CONTINUATION_INSTRUCTION",
]
