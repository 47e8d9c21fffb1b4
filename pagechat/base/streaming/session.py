"""Transport session controller.

The controller drives one assistant turn at a time through the upstream
event stream:

``IDLE → CONNECTING → STREAMING → FINALIZING → IDLE``

Hard failures pass through ``ERROR`` before ``FINALIZING``; ``cancel()``
returns straight to ``IDLE``. A finalized reply that looks cut off is
continued once (same turn, deltas keep appending) before the single terminal
callback fires.

Design notes:
    * One controller per conversation; no module-level mutable state.
    * Every turn runs inside its own ``_TurnRun`` record (accumulator, token,
      timers, network task). Late work from a cancelled run checks its own
      ``closed`` flag and never touches the turn that replaced it.
    * The network read runs in an inner task so timers and ``cancel()`` can
      interrupt it without cancelling the outer turn task; the outer task
      always resolves to the finalized :class:`Turn`.
    * Nothing but :class:`SessionBusyError` (from :meth:`start_turn`) escapes
      this boundary. Failures become error-flagged turns; callback errors are
      logged and swallowed.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import (
    Any,
    AsyncContextManager,
    AsyncIterator,
    Callable,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from ..cancellation import CancellationToken
from ..errors import ErrorCode, SessionBusyError, TurnError, classify_exception, user_message
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from ..models import SessionState, Turn
from ..timeouts import TimeoutConfig, get_timeout_config
from .accumulator import TurnAccumulator
from .frame_parser import FrameParser
from .frames import DeltaFrame, DoneFrame, ErrorFrame, Frame
from .truncation import ContinuationPolicy
from .watchdog import Watchdog

_logger = get_logger("pagechat.streaming.session")

ChunkCallback = Callable[[int, str], None]
FinalizeCallback = Callable[[Turn], None]
StateCallback = Callable[[SessionState], None]
ContinuationFactory = Callable[[str], Any]


@runtime_checkable
class StreamTransport(Protocol):
    """Anything that can open the upstream event stream for a payload.

    ``stream`` returns an async context manager; entering it sends the request
    and waits for the response headers (raising :class:`TurnError` for a
    non-success status), and the yielded iterator produces body slices.
    """

    def stream(
        self, payload: Any, token: CancellationToken
    ) -> AsyncContextManager[AsyncIterator[Union[str, bytes]]]: ...


class _Kind(str, Enum):
    COMPLETED = "completed"
    SOFT = "soft"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class _Outcome:
    kind: _Kind
    code: Optional[ErrorCode] = None
    message: Optional[str] = None
    status: Optional[int] = None


_DONE = _Outcome(_Kind.COMPLETED)


class _TurnRun:
    """Per-turn bookkeeping; discarded once the turn is finalized."""

    def __init__(self, turn: Turn, payload: Any, ctx: LogContext) -> None:
        self.turn = turn
        self.payload = payload
        self.ctx = ctx
        self.accumulator = TurnAccumulator(turn)
        self.token = CancellationToken()
        self.io_task: Optional[asyncio.Task] = None
        self.task: Optional[asyncio.Task] = None
        self.interrupt: Optional[_Outcome] = None
        self.connect: Optional[Watchdog] = None
        self.stall: Optional[Watchdog] = None
        self.continuing = False
        self.continuation_failed = False
        self.closed = False

    def stop_timers(self) -> None:
        for timer in (self.connect, self.stall):
            if timer is not None:
                timer.cancel()


class SessionController:
    """Owns the lifecycle of the assistant turns of one conversation.

    Parameters:
        transport: A :class:`StreamTransport` (normally
            :class:`~pagechat.base.http.UpstreamClient`).
        timeouts: Connect and stall bounds; defaults to
            :func:`~pagechat.base.timeouts.get_timeout_config`.
        policy: Continuation policy (one attempt by default).
        continuation_payload: ``factory(partial_text) -> payload`` used for
            the automatic continuation. Without it replies are never continued.
        on_chunk: ``callback(turn_id, content)`` after every delta.
        on_finalize: ``callback(turn)`` exactly once per turn.
        on_state_change: ``callback(state)`` on every transition.
        session_id: Correlation id carried by every log event.
    """

    def __init__(
        self,
        transport: StreamTransport,
        *,
        timeouts: Optional[TimeoutConfig] = None,
        policy: Optional[ContinuationPolicy] = None,
        continuation_payload: Optional[ContinuationFactory] = None,
        on_chunk: Optional[ChunkCallback] = None,
        on_finalize: Optional[FinalizeCallback] = None,
        on_state_change: Optional[StateCallback] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self._transport = transport
        self._timeouts = timeouts or get_timeout_config()
        self._policy = policy or ContinuationPolicy()
        self._continuation_payload = continuation_payload
        self._on_chunk = on_chunk
        self._on_finalize = on_finalize
        self._on_state_change = on_state_change
        self._ctx = LogContext(session_id=session_id)
        self._state = SessionState.IDLE
        self._run: Optional[_TurnRun] = None
        self._continuation_attempts = 0

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._state is not SessionState.IDLE

    @property
    def active_turn_id(self) -> Optional[int]:
        return self._run.turn.id if self._run is not None else None

    @property
    def continuation_attempts(self) -> int:
        """Continuations issued for the current (or most recent) turn."""
        return self._continuation_attempts

    @property
    def timeouts(self) -> TimeoutConfig:
        return self._timeouts

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def start_turn(self, payload: Any) -> "asyncio.Task[Turn]":
        """Start a new assistant turn and return the task resolving to it.

        Must be called from a running event loop.

        Raises:
            SessionBusyError: another turn is connecting or streaming. The
                in-flight turn is left untouched.
        """
        if self._state is not SessionState.IDLE or self._run is not None:
            active = self.active_turn_id
            log_event(
                _logger,
                "session.busy",
                self._ctx,
                level=logging.WARNING,
                state=self._state.value,
                active_turn_id=active,
            )
            raise SessionBusyError(active)

        loop = asyncio.get_running_loop()
        turn = Turn(role="assistant")
        run = _TurnRun(turn, payload, self._ctx.for_turn(turn.id))
        self._run = run
        self._continuation_attempts = 0
        normalized_log_event(_logger, "stream.start", run.ctx, phase="start", attempt=0, emitted=False)
        self._set_state(run, SessionState.CONNECTING)
        run.task = loop.create_task(self._drive(run))
        return run.task

    async def run_turn(self, payload: Any) -> Turn:
        """Start a turn and wait for its finalized :class:`Turn`."""
        return await self.start_turn(payload)

    def cancel(self, reason: str = "cancelled") -> Optional[Turn]:
        """Stop the active turn and finalize it with its current content.

        Safe from any state; returns ``None`` when nothing was in flight. The
        turn is not error-flagged and never continued. Deltas racing with the
        cancellation are discarded.
        """
        run = self._run
        if run is None or run.closed:
            return None
        if run.interrupt is None:
            run.interrupt = _Outcome(_Kind.CANCELLED, code=ErrorCode.CANCELLED)
        normalized_log_event(
            _logger,
            "stream.cancel",
            run.ctx,
            phase="cancel",
            attempt=self._continuation_attempts,
            emitted=run.turn.chunk_count > 0,
            reason=reason,
        )
        run.token.cancel(reason)
        if run.io_task is not None and not run.io_task.done():
            run.io_task.cancel()
        self._finish(run, code=ErrorCode.CANCELLED, via_finalizing=False)
        return run.turn

    # ------------------------------------------------------------------
    # Turn driver
    # ------------------------------------------------------------------
    async def _drive(self, run: _TurnRun) -> Turn:
        payload = run.payload
        try:
            while not run.closed:
                outcome = await self._attempt(run, payload)
                if run.closed:
                    break
                if outcome.kind is _Kind.CANCELLED:
                    self._finish(run, code=ErrorCode.CANCELLED, via_finalizing=False)
                    break
                if outcome.kind is _Kind.FAILED:
                    self._fail(run, outcome)
                    break
                self._set_state(run, SessionState.FINALIZING)
                next_payload = self._maybe_continue(run)
                if next_payload is None:
                    code = ErrorCode.CONTINUATION_FAILED if run.continuation_failed else outcome.code
                    self._finish(run, code=code)
                    break
                payload = next_payload
        except asyncio.CancelledError:
            # the outer task itself was cancelled by its owner
            if not run.closed and self._run is run:
                self.cancel("task cancelled")
            raise
        return run.turn

    async def _attempt(self, run: _TurnRun, payload: Any) -> _Outcome:
        """Open one stream request and read it to an outcome."""
        run.interrupt = None
        attempt = self._continuation_attempts
        run.connect = Watchdog(
            "connect",
            self._timeouts.connect_timeout_seconds,
            lambda: self._on_connect_timeout(run),
            token=run.token,
        )
        run.stall = Watchdog(
            "stall",
            self._timeouts.stall_timeout_seconds,
            lambda: self._on_stall(run),
            token=run.token,
        )
        if run.token.cancelled:
            return _Outcome(_Kind.CANCELLED)
        run.connect.arm()
        io = asyncio.ensure_future(self._stream_once(run, payload))
        run.io_task = io
        try:
            await asyncio.wait({io})
        except asyncio.CancelledError:
            io.cancel()
            run.stop_timers()
            raise
        run.stop_timers()

        if io.cancelled():
            return run.interrupt or _Outcome(_Kind.CANCELLED)
        exc = io.exception()
        if exc is None:
            return io.result()
        return self._classify_failure(run, exc, attempt)

    async def _stream_once(self, run: _TurnRun, payload: Any) -> _Outcome:
        parser = FrameParser(ctx=run.ctx)
        async with self._transport.stream(payload, run.token) as chunks:
            self._on_connected(run)
            async for data in chunks:
                for frame in parser.feed(data):
                    outcome = self._apply(run, frame)
                    if outcome is not None:
                        return outcome
            for frame in parser.flush():
                outcome = self._apply(run, frame)
                if outcome is not None:
                    return outcome
        return _DONE

    def _apply(self, run: _TurnRun, frame: Frame) -> Optional[_Outcome]:
        """Apply one decoded frame; return an outcome when the stream ends."""
        if run.closed:
            return _Outcome(_Kind.CANCELLED)
        if isinstance(frame, DoneFrame):
            return _DONE
        if isinstance(frame, ErrorFrame):
            return _Outcome(
                _Kind.FAILED,
                code=ErrorCode.UPSTREAM_ERROR,
                message=frame.message or user_message(ErrorCode.UPSTREAM_ERROR),
            )
        if isinstance(frame, DeltaFrame):
            content = run.accumulator.append(frame.text)
            if run.stall is not None:
                run.stall.reset()
            log_event(
                _logger,
                "stream.delta",
                run.ctx,
                level=logging.DEBUG,
                chunk=run.turn.chunk_count,
                length=len(content),
            )
            self._emit(self._on_chunk, run.turn.id, content)
        return None

    def _classify_failure(self, run: _TurnRun, exc: BaseException, attempt: int) -> _Outcome:
        code = classify_exception(exc)
        status = exc.status if isinstance(exc, TurnError) else None
        message = exc.message if isinstance(exc, TurnError) else user_message(code, status)
        if run.turn.content and not isinstance(exc, TurnError):
            # read failure after content arrived: keep the partial reply
            normalized_log_event(
                _logger,
                "stream.read_error",
                run.ctx,
                phase="stream",
                attempt=attempt,
                error_code=code.value,
                emitted=True,
                level=logging.WARNING,
                error=str(exc),
            )
            return _Outcome(_Kind.SOFT, code=code)
        return _Outcome(_Kind.FAILED, code=code, message=message, status=status)

    # ------------------------------------------------------------------
    # Timer and connection events
    # ------------------------------------------------------------------
    def _on_connected(self, run: _TurnRun) -> None:
        if run.closed:
            return
        if run.connect is not None:
            run.connect.cancel()
        self._set_state(run, SessionState.STREAMING)
        if run.stall is not None:
            run.stall.arm()
        normalized_log_event(
            _logger,
            "stream.connected",
            run.ctx,
            phase="connect",
            attempt=self._continuation_attempts,
            emitted=run.turn.chunk_count > 0,
        )

    def _on_connect_timeout(self, run: _TurnRun) -> None:
        self._interrupt(
            run,
            _Outcome(
                _Kind.FAILED,
                code=ErrorCode.CONNECT_TIMEOUT,
                message=user_message(ErrorCode.CONNECT_TIMEOUT),
            ),
            "stream.connect_timeout",
            self._timeouts.connect_timeout_seconds,
        )

    def _on_stall(self, run: _TurnRun) -> None:
        self._interrupt(
            run,
            _Outcome(_Kind.SOFT, code=ErrorCode.STALL_TIMEOUT),
            "stream.stall",
            self._timeouts.stall_timeout_seconds,
        )

    def _interrupt(self, run: _TurnRun, outcome: _Outcome, event: str, after: float) -> None:
        if run.closed or run.interrupt is not None:
            return
        run.interrupt = outcome
        normalized_log_event(
            _logger,
            event,
            run.ctx,
            phase="timeout",
            attempt=self._continuation_attempts,
            error_code=outcome.code.value if outcome.code else None,
            emitted=run.turn.chunk_count > 0,
            level=logging.WARNING,
            timeout_seconds=after,
        )
        if run.io_task is not None and not run.io_task.done():
            run.io_task.cancel()

    # ------------------------------------------------------------------
    # Continuation and finalization
    # ------------------------------------------------------------------
    def _maybe_continue(self, run: _TurnRun) -> Any:
        """Return the continuation payload, or ``None`` to finalize now."""
        if self._continuation_payload is None:
            return None
        partial = run.turn.content.strip()
        if not self._policy.should_continue(partial, self._continuation_attempts):
            return None
        try:
            payload = self._continuation_payload(partial)
        except Exception as exc:
            normalized_log_event(
                _logger,
                "stream.continuation.failed",
                run.ctx,
                phase="continuation",
                attempt=self._continuation_attempts + 1,
                error_code=ErrorCode.CONTINUATION_FAILED.value,
                emitted=True,
                level=logging.WARNING,
                error=str(exc),
            )
            run.continuation_failed = True
            return None
        self._continuation_attempts += 1
        run.continuing = True
        normalized_log_event(
            _logger,
            "stream.continuation",
            run.ctx,
            phase="continuation",
            attempt=self._continuation_attempts,
            emitted=True,
            partial_length=len(partial),
        )
        self._set_state(run, SessionState.CONNECTING)
        return payload

    def _fail(self, run: _TurnRun, outcome: _Outcome) -> None:
        code = outcome.code or ErrorCode.UNKNOWN
        if run.continuing:
            normalized_log_event(
                _logger,
                "stream.continuation.failed",
                run.ctx,
                phase="continuation",
                attempt=self._continuation_attempts,
                error_code=code.value,
                emitted=True,
                level=logging.WARNING,
                status=outcome.status,
            )
            self._finish(run, code=ErrorCode.CONTINUATION_FAILED)
            return
        self._set_state(run, SessionState.ERROR)
        message = outcome.message or user_message(code, outcome.status)
        self._finish(run, code=code, error=True, message=message)

    def _finish(
        self,
        run: _TurnRun,
        *,
        code: Optional[ErrorCode] = None,
        error: bool = False,
        message: Optional[str] = None,
        via_finalizing: bool = True,
    ) -> None:
        """Seal the turn, return to IDLE and fire the terminal callback once."""
        if run.closed:
            return
        if via_finalizing and self._state is not SessionState.FINALIZING:
            self._set_state(run, SessionState.FINALIZING)
        run.closed = True
        run.stop_timers()
        content = run.turn.content.strip()
        if error:
            content = content or (message or "")
        turn = run.accumulator.seal(
            error=error,
            error_code=code.value if code is not None else None,
            content=content,
        )
        if self._run is run:
            self._run = None
            self._transition(SessionState.IDLE, run.ctx)
        normalized_log_event(
            _logger,
            "stream.finalize",
            run.ctx,
            phase="finalize",
            attempt=self._continuation_attempts,
            error_code=turn.error_code,
            emitted=turn.chunk_count > 0,
            level=logging.WARNING if error else logging.INFO,
            was_error=error,
            chunks=turn.chunk_count,
            length=len(turn.content),
        )
        self._emit(self._on_finalize, turn)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _set_state(self, run: _TurnRun, state: SessionState) -> None:
        if run.closed or self._run is not run:
            return
        self._transition(state, run.ctx)

    def _transition(self, state: SessionState, ctx: LogContext) -> None:
        if state is self._state:
            return
        previous = self._state
        self._state = state
        log_event(
            _logger,
            "session.state",
            ctx,
            level=logging.DEBUG,
            previous=previous.value,
            state=state.value,
        )
        self._emit(self._on_state_change, state)

    def _emit(self, callback: Optional[Callable[..., None]], *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            _logger.exception("session callback %r failed", getattr(callback, "__name__", callback))


__all__ = [
    "SessionController",
    "StreamTransport",
    "ChunkCallback",
    "FinalizeCallback",
    "StateCallback",
    "ContinuationFactory",
]
