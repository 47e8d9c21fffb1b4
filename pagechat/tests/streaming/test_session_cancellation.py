"""Busy rejection, cancellation and multiple independent sessions."""
from __future__ import annotations

import asyncio

import pytest

from pagechat.base.errors import SessionBusyError
from pagechat.base.models import SessionState
from pagechat.base.streaming import SessionController
from pagechat.tests.helpers import DONE, Recorder, Script, ScriptedTransport, sse, wait_for

PAYLOAD = {"messages": []}


def _controller(transport, rec, **kwargs):
    return SessionController(
        transport,
        on_chunk=rec.on_chunk,
        on_finalize=rec.on_finalize,
        on_state_change=rec.on_state_change,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_start_while_streaming_is_rejected_without_touching_turn():
    rec = Recorder()
    transport = ScriptedTransport(Script(chunks=[sse("first")], hang=True))
    controller = _controller(transport, rec)

    task = controller.start_turn(PAYLOAD)
    with pytest.raises(SessionBusyError):
        controller.start_turn({"messages": ["second"]})  # still connecting
    await wait_for(lambda: rec.contents)
    active = controller.active_turn_id

    with pytest.raises(SessionBusyError) as info:
        controller.start_turn({"messages": ["second"]})
    assert info.value.active_turn_id == active  # nosec B101
    assert controller.state is SessionState.STREAMING  # nosec B101
    assert transport.calls == 1 and rec.contents == ["first"]  # nosec B101

    controller.cancel()
    turn = await task
    assert turn.id == active and turn.content == "first"  # nosec B101
    assert not turn.error and turn.error_code == "cancelled"  # nosec B101
    assert rec.finalized == [turn]  # nosec B101


@pytest.mark.asyncio
async def test_cancel_when_idle_is_a_noop():
    rec = Recorder()
    controller = _controller(ScriptedTransport(), rec)
    assert controller.cancel() is None  # nosec B101
    assert rec.finalized == [] and rec.states == []  # nosec B101


@pytest.mark.asyncio
async def test_cancel_while_connecting_returns_to_idle_directly():
    rec = Recorder()
    transport = ScriptedTransport(Script(connect_delay=10))
    controller = _controller(transport, rec)
    task = controller.start_turn(PAYLOAD)
    await asyncio.sleep(0.01)

    cancelled = controller.cancel("user")

    assert controller.state is SessionState.IDLE  # nosec B101
    assert rec.states == [SessionState.CONNECTING, SessionState.IDLE]  # nosec B101
    assert cancelled is not None and cancelled.content == "" and not cancelled.error  # nosec B101
    assert rec.finalized == [cancelled]  # nosec B101
    assert await task is cancelled  # nosec B101
    assert transport.tokens[0].cancelled  # nosec B101
    await wait_for(lambda: transport.closed_streams == 1)


@pytest.mark.asyncio
async def test_cancel_finalizes_synchronously_and_allows_immediate_restart():
    rec = Recorder()
    transport = ScriptedTransport(Script(chunks=[sse("old")], hang=True), Script(chunks=[sse("new."), DONE]))
    controller = _controller(transport, rec)
    first = controller.start_turn(PAYLOAD)
    await wait_for(lambda: rec.contents)

    controller.cancel()
    second = controller.start_turn(PAYLOAD)

    old, new = await first, await second
    assert old.content == "old" and new.content == "new."  # nosec B101
    assert old.id != new.id  # nosec B101
    assert rec.finalized == [old, new]  # nosec B101
    assert all(turn_id in (old.id, new.id) for turn_id, _ in rec.chunks)  # nosec B101


@pytest.mark.asyncio
async def test_deltas_racing_with_cancel_are_discarded():
    rec = Recorder()
    controller = None

    def on_chunk(turn_id, content):
        rec.on_chunk(turn_id, content)
        controller.cancel("stop")

    transport = ScriptedTransport(Script(chunks=[sse("a", "b", "c") + DONE]))
    controller = SessionController(transport, on_chunk=on_chunk, on_finalize=rec.on_finalize)
    turn = await controller.run_turn(PAYLOAD)
    assert rec.contents == ["a"]  # nosec B101
    assert turn.content == "a" and not turn.error  # nosec B101
    assert rec.finalized == [turn]  # nosec B101


@pytest.mark.asyncio
async def test_terminal_callback_may_start_a_retry():
    rec = Recorder()
    retries = []
    controller = None

    def on_finalize(turn):
        rec.on_finalize(turn)
        if turn.error and not retries:
            retries.append(controller.start_turn(PAYLOAD))

    transport = ScriptedTransport(Script(status=500), Script(chunks=[sse("ok then."), DONE]))
    controller = SessionController(transport, on_finalize=on_finalize)
    failed = await controller.run_turn(PAYLOAD)
    assert failed.error  # nosec B101
    retried = await retries[0]
    assert retried.content == "ok then." and not retried.error  # nosec B101
    assert [t.id for t in rec.finalized] == [failed.id, retried.id]  # nosec B101


@pytest.mark.asyncio
async def test_cancelling_the_turn_task_finalizes_once():
    rec = Recorder()
    controller = _controller(ScriptedTransport(Script(chunks=[sse("first")], hang=True)), rec)
    task = controller.start_turn(PAYLOAD)
    await wait_for(lambda: rec.contents)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert len(rec.finalized) == 1 and rec.finalized[0].content == "first"  # nosec B101
    assert controller.state is SessionState.IDLE  # nosec B101


@pytest.mark.asyncio
async def test_sessions_are_independent():
    rec_a, rec_b = Recorder(), Recorder()
    a = _controller(ScriptedTransport(Script(chunks=[sse("alpha."), DONE], chunk_delay=0.01)), rec_a)
    b = _controller(ScriptedTransport(Script(chunks=[sse("beta."), DONE], chunk_delay=0.01)), rec_b)
    turn_a, turn_b = await asyncio.gather(a.run_turn(PAYLOAD), b.run_turn(PAYLOAD))
    assert (turn_a.content, turn_b.content) == ("alpha.", "beta.")  # nosec B101
    assert rec_a.contents == ["alpha."] and rec_b.contents == ["beta."]  # nosec B101
