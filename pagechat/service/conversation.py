"""Conversation facade wiring the context manager to the session controller.

``Conversation`` is what a UI talks to. It owns one
:class:`~pagechat.base.context.ConversationContext` and one
:class:`~pagechat.base.streaming.SessionController`, refreshes the page
snapshot from the observer, computes tone hints, records turns in the right
order and exposes the manual retry that error turns offer.

Ordering rules:
    * The payload is built *before* the user turn is recorded, so the window
      never contains the message being sent.
    * Only finalized, non-error, non-empty assistant turns are recorded.
    * ``retry`` resends the last user message without recording it again.
"""
from __future__ import annotations

import asyncio
import uuid
from typing import Any, Callable, Mapping, Optional, Union

from ..base.context import ConversationContext, SkillEstimator, conversation_hint
from ..base.errors import SessionBusyError
from ..base.http import UpstreamClient
from ..base.logging import LogContext, get_logger, log_event
from ..base.models import PageContext, SessionState, Turn
from ..base.streaming import ContinuationPolicy, SessionController, StreamTransport
from ..base.timeouts import TimeoutConfig
from ..config import Settings, get_settings

_logger = get_logger("pagechat.service.conversation")

PageSource = Union[PageContext, Mapping[str, Any]]
PageObserver = Callable[[], Optional[PageSource]]


class Conversation:
    """One page-aware chat conversation.

    Parameters:
        transport: Stream transport; an :class:`UpstreamClient` built from
            ``settings`` when omitted (and closed by :meth:`aclose`).
        settings: Resolved settings; :func:`get_settings` when omitted.
        observer: Zero-argument callable returning the current page
            (``PageContext`` or ``{title, url, textContent, mode}``).
        timeouts: Overrides the timeouts derived from ``settings``.
        on_chunk / on_finalize / on_state_change: Forwarded session callbacks.
    """

    def __init__(
        self,
        transport: Optional[StreamTransport] = None,
        *,
        settings: Optional[Settings] = None,
        observer: Optional[PageObserver] = None,
        timeouts: Optional[TimeoutConfig] = None,
        on_chunk: Optional[Callable[[int, str], None]] = None,
        on_finalize: Optional[Callable[[Turn], None]] = None,
        on_state_change: Optional[Callable[[SessionState], None]] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self._ctx = LogContext(session_id=self.session_id)
        resolved_timeouts = timeouts or self.settings.timeouts()
        self._owns_transport = transport is None
        if transport is None:
            transport = UpstreamClient(
                self.settings.stream_url,
                self.settings.complete_url,
                timeouts=resolved_timeouts,
            )
        self.transport = transport
        self.context = ConversationContext(self.settings.context_limits(), session_id=self.session_id)
        self.skill = SkillEstimator()
        self._observer = observer
        self._on_finalize = on_finalize
        self._last_mode: Optional[str] = None
        self.session = SessionController(
            transport,
            timeouts=resolved_timeouts,
            policy=ContinuationPolicy(max_attempts=self.settings.max_continuations),
            continuation_payload=self.context.build_continuation_payload,
            on_chunk=on_chunk,
            on_finalize=self._handle_finalize,
            on_state_change=on_state_change,
            session_id=self.session_id,
        )

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def page_context(self) -> Optional[PageContext]:
        return self.context.page_context

    def refresh_page(self) -> Optional[PageContext]:
        """Pull the current page from the observer (if any)."""
        if self._observer is None:
            return self.context.page_context
        return self.context.update_page_context(self._observer())

    def submit(self, text: str, mode: Optional[str] = None) -> "asyncio.Task[Turn]":
        """Send a user message and return the task resolving to the reply.

        Raises:
            ValueError: ``text`` is blank.
            SessionBusyError: a reply is still streaming; nothing is recorded.
        """
        text = text.strip()
        if not text:
            raise ValueError("message is empty")
        if self.session.is_busy:
            raise SessionBusyError(self.session.active_turn_id)
        self.refresh_page()
        payload = self.context.build_payload(text, mode, hints=self._hints(text))
        task = self.session.start_turn(payload)
        self.context.record_turn("user", text)
        self._last_mode = mode
        log_event(
            _logger,
            "conversation.submit",
            self._ctx.for_turn(self.session.active_turn_id or 0),
            mode=payload.mode,
            messages=len(payload.messages),
        )
        return task

    def retry(self) -> "asyncio.Task[Turn]":
        """Resend the last user message (manual retry after an error turn).

        Raises:
            ValueError: nothing has been sent yet.
            SessionBusyError: a reply is still streaming.
        """
        text = self.context.last_user_message()
        if text is None:
            raise ValueError("no user message to retry")
        if self.session.is_busy:
            raise SessionBusyError(self.session.active_turn_id)
        self.refresh_page()
        payload = self.context.build_payload(text, self._last_mode, hints=self._hints(text, analyze=False), resend=True)
        log_event(_logger, "conversation.retry", self._ctx, mode=payload.mode)
        return self.session.start_turn(payload)

    def cancel(self) -> Optional[Turn]:
        return self.session.cancel("user")

    def navigate(self, page: Optional[PageSource] = None) -> Optional[PageContext]:
        """Handle a page change: stop the active reply and swap the snapshot."""
        self.session.cancel("navigation")
        if page is None:
            return self.refresh_page()
        return self.context.update_page_context(page)

    def recap(self) -> str:
        """Return a recap when one is due, else an empty string."""
        if not self.context.should_offer_recap():
            return ""
        return self.context.generate_recap()

    async def aclose(self) -> None:
        self.session.cancel("closed")
        if self._owns_transport:
            close = getattr(self.transport, "aclose", None)
            if close is not None:
                await close()

    def _hints(self, text: str, *, analyze: bool = True) -> list:
        follow_up = self.context.is_follow_up(text)
        if analyze:
            self.skill.analyze(text)
        return [
            conversation_hint(text, follow_up, self.context.turn_count),
            self.skill.depth_hint(),
        ]

    def _handle_finalize(self, turn: Turn) -> None:
        if not turn.error and turn.content:
            self.context.record(turn)
        if self._on_finalize is not None:
            self._on_finalize(turn)


__all__ = ["Conversation", "PageObserver"]
