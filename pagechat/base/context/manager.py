"""
Bounded conversation context and outbound payload construction.

``ConversationContext`` owns the finalized turns of one conversation and the
current page snapshot. It is the only writer of history; the session never
touches it. Both payload builders are pure with respect to history: they
read a consistent snapshot under the lock and never mutate it.

Payload shape (see :class:`~pagechat.base.models.ChatPayload`)::

    {"systemInstructions": str, "messages": [{"role", "content"}], "mode": str}

The new user message is enriched with page context on the first turn (full
title/url/mode/excerpt block) and on page-referential turns (a short
``[Referring to: <title>]`` back-reference).
"""
from __future__ import annotations

import logging
from threading import RLock
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from ..constants import CONTINUATION_INSTRUCTION, DEFAULT_MODE
from ..logging import LogContext, get_logger, log_event
from ..models import ChatMessage, ChatPayload, PageContext, Role, Turn
from .instructions import DEFAULT_INSTRUCTIONS, InstructionSet
from .limits import ContextLimits
from .triggers import follow_up_signal, is_page_query, word_count

_logger = get_logger("pagechat.context")

RECAP_MIN_HISTORY = 6
RECAP_SAMPLE_SIZE = 5
RECAP_ITEM_MAX_CHARS = 60

Hints = Union[str, Sequence[str], None]


def _join_hints(hints: Hints) -> str:
    if not hints:
        return ""
    parts = [hints] if isinstance(hints, str) else list(hints)
    return "\n".join(p.strip() for p in parts if p and p.strip())


class ConversationContext:
    """History, page snapshot and payload builders for one conversation.

    Parameters:
        limits: Retention and window bounds (defaults: 40 / 12 / 4).
        instructions: Core brief and mode augmentations.
        session_id: Correlation id for log events.
    """

    def __init__(
        self,
        limits: Optional[ContextLimits] = None,
        instructions: Optional[InstructionSet] = None,
        *,
        session_id: Optional[str] = None,
    ) -> None:
        self._limits = limits or ContextLimits()
        self._instructions = instructions or DEFAULT_INSTRUCTIONS
        self._lock = RLock()
        self._history: List[Turn] = []
        self._turn_count = 0
        self._page: Optional[PageContext] = None
        self._ctx = LogContext(session_id=session_id)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    @property
    def limits(self) -> ContextLimits:
        return self._limits

    @property
    def instructions(self) -> InstructionSet:
        return self._instructions

    @property
    def history(self) -> Tuple[Turn, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def context_window(self) -> Tuple[Turn, ...]:
        """The most recent ``window_size`` turns, oldest first."""
        with self._lock:
            return self._window(self._history, self._limits.window_size)

    @property
    def turn_count(self) -> int:
        """Total turns recorded since the last clear (not capped by eviction)."""
        return self._turn_count

    def __len__(self) -> int:
        return len(self._history)

    def record_turn(self, role: Role, content: str) -> Optional[Turn]:
        """Record a finalized turn built from ``role`` and ``content``.

        Blank content is ignored and returns ``None``.
        """
        if not content or not content.strip():
            return None
        return self.record(Turn.finalized(role, content.strip()))

    def record(self, turn: Turn) -> Optional[Turn]:
        """Append an already finalized turn, evicting the oldest on overflow.

        Raises:
            ValueError: ``turn`` is still in flight.
        """
        if not turn.is_final:
            raise ValueError(f"turn {turn.id} is not finalized; only finalized turns are recorded")
        if not turn.content.strip():
            return None
        with self._lock:
            self._history.append(turn)
            self._turn_count += 1
            overflow = len(self._history) - self._limits.history_limit
            if overflow > 0:
                del self._history[:overflow]
        if overflow > 0:
            log_event(
                _logger,
                "context.evict",
                self._ctx,
                level=logging.DEBUG,
                evicted=overflow,
                retained=self._limits.history_limit,
            )
        return turn

    def last_assistant_message(self) -> Optional[str]:
        return self._last_content("assistant")

    def last_user_message(self) -> Optional[str]:
        return self._last_content("user")

    def _last_content(self, role: Role) -> Optional[str]:
        with self._lock:
            for turn in reversed(self._history):
                if turn.role == role:
                    return turn.content
        return None

    def clear(self) -> None:
        """Drop history and the turn counter; the page snapshot is kept."""
        with self._lock:
            self._history.clear()
            self._turn_count = 0

    def reset(self) -> None:
        """Drop history, the turn counter and the page snapshot."""
        with self._lock:
            self._history.clear()
            self._turn_count = 0
            self._page = None

    # ------------------------------------------------------------------
    # Page context
    # ------------------------------------------------------------------
    @property
    def page_context(self) -> Optional[PageContext]:
        return self._page

    def update_page_context(
        self, page: Union[PageContext, Mapping[str, Any], None]
    ) -> Optional[PageContext]:
        """Replace the page snapshot wholesale (``None`` leaves it unchanged)."""
        if page is None:
            return self._page
        snapshot = PageContext.from_observer(page)
        with self._lock:
            self._page = snapshot
        return snapshot

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------
    def build_payload(
        self,
        user_text: str,
        mode: Optional[str] = None,
        *,
        hints: Hints = None,
        resend: bool = False,
    ) -> ChatPayload:
        """Build the payload for a new user message.

        Parameters:
            user_text: The message as typed.
            mode: Page mode; defaults to the page snapshot's mode.
            hints: Tone hints appended to the system instructions.
            resend: Manual retry of the last user message, which is already
                recorded; a trailing user entry is left out of the window so
                it is not sent twice.
        """
        with self._lock:
            history = list(self._history)
            page = self._page
        if resend and history and history[-1].role == "user":
            history.pop()
        window = self._window(history, self._limits.window_size)
        resolved_mode = mode or (page.mode if page else DEFAULT_MODE)

        system = self._instructions.for_mode(resolved_mode)
        hint_text = _join_hints(hints)
        if hint_text:
            system = f"{system}\n{hint_text}"

        content = self._enrich(user_text, page, first=not history)
        messages = [ChatMessage(role=t.role, content=t.content) for t in window]
        messages.append(ChatMessage(role="user", content=content))
        return ChatPayload(system_instructions=system, messages=messages, mode=resolved_mode)

    def build_continuation_payload(self, partial: Optional[str] = None) -> ChatPayload:
        """Build the payload asking the model to resume a cut-off reply.

        Only the core instructions and the last few turns are sent; page
        context is never re-embedded.
        """
        with self._lock:
            window = self._window(self._history, self._limits.continuation_window)
            page = self._page
        messages = [ChatMessage(role=t.role, content=t.content) for t in window]
        if partial and partial.strip():
            messages.append(ChatMessage(role="assistant", content=partial))
        messages.append(ChatMessage(role="user", content=CONTINUATION_INSTRUCTION))
        return ChatPayload(
            system_instructions=self._instructions.core,
            messages=messages,
            mode=page.mode if page else DEFAULT_MODE,
        )

    @staticmethod
    def _window(history: Sequence[Turn], size: int) -> Tuple[Turn, ...]:
        if size <= 0:
            return ()
        return tuple(history[-size:])

    @staticmethod
    def _enrich(user_text: str, page: Optional[PageContext], *, first: bool) -> str:
        if page is None:
            return user_text
        if first:
            return (
                "[Page Context]\n"
                f"Title: {page.title}\n"
                f"URL: {page.url}\n"
                f"Type: {page.mode}\n"
                "\n"
                "Page Content:\n"
                f"{page.excerpt}\n"
                "\n"
                "---\n"
                f"{user_text}"
            )
        if is_page_query(user_text):
            return f"[Referring to: {page.title}]\n{user_text}"
        return user_text

    # ------------------------------------------------------------------
    # Conversation-level helpers
    # ------------------------------------------------------------------
    def is_follow_up(self, user_text: str) -> bool:
        """True when ``user_text`` continues the current thread.

        Requires at least two recorded turns; then any message shorter than
        the word limit, or one containing a follow-up marker, qualifies.
        """
        if len(self._history) < self._limits.follow_up_min_history:
            return False
        if word_count(user_text) < self._limits.follow_up_word_limit:
            return True
        return follow_up_signal(user_text)

    def should_offer_recap(self) -> bool:
        count = self._turn_count
        return count > 0 and count % self._limits.recap_threshold == 0

    def generate_recap(self) -> str:
        """Summarize the thread from a spread of sampled user messages."""
        with self._lock:
            if len(self._history) < RECAP_MIN_HISTORY:
                return ""
            user_turns = [t.content for t in self._history if t.role == "user"]
            count = self._turn_count
        if not user_turns:
            return ""
        sample = min(len(user_turns), RECAP_SAMPLE_SIZE)
        lines = []
        for i in range(sample):
            text = user_turns[int(i * len(user_turns) / sample)]
            if len(text) > RECAP_ITEM_MAX_CHARS:
                text = text[: RECAP_ITEM_MAX_CHARS - 3] + "..."
            lines.append(f"{i + 1}. {text}")
        return f"Conversation recap ({count} messages):\n" + "\n".join(lines)


__all__ = ["ConversationContext", "RECAP_MIN_HISTORY"]
