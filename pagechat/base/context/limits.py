"""Bounds applied by the conversation context manager."""
from __future__ import annotations

from dataclasses import dataclass

from ..constants import (
    CONTEXT_WINDOW_SIZE,
    CONTINUATION_WINDOW_SIZE,
    FOLLOW_UP_MIN_HISTORY,
    FOLLOW_UP_WORD_LIMIT,
    HISTORY_LIMIT,
    RECAP_THRESHOLD,
)


@dataclass(frozen=True)
class ContextLimits:
    """Numeric limits for history retention and payload windows.

    Attributes:
        history_limit: Maximum recorded turns; oldest evicted first.
        window_size: History entries sent with each payload.
        continuation_window: History entries sent with a continuation.
        recap_threshold: A recap is offered every N recorded turns.
        follow_up_word_limit: Messages shorter than this count as follow-ups.
        follow_up_min_history: Entries required before follow-ups are detected.
    """

    history_limit: int = HISTORY_LIMIT
    window_size: int = CONTEXT_WINDOW_SIZE
    continuation_window: int = CONTINUATION_WINDOW_SIZE
    recap_threshold: int = RECAP_THRESHOLD
    follow_up_word_limit: int = FOLLOW_UP_WORD_LIMIT
    follow_up_min_history: int = FOLLOW_UP_MIN_HISTORY

    def __post_init__(self) -> None:
        if self.history_limit < 1:
            raise ValueError("history_limit must be >= 1")
        if not 0 <= self.window_size <= self.history_limit:
            raise ValueError("window_size must be between 0 and history_limit")
        if not 0 <= self.continuation_window <= self.history_limit:
            raise ValueError("continuation_window must be between 0 and history_limit")


__all__ = ["ContextLimits"]
