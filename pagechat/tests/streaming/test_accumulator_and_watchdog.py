"""Turn accumulator invariants and watchdog timer behaviour."""
from __future__ import annotations

import asyncio

import pytest

from pagechat.base.cancellation import CancellationToken
from pagechat.base.models import Turn, TurnStatus
from pagechat.base.streaming import TurnAccumulator, Watchdog


def test_accumulator_snapshots_are_strict_prefix_extensions():
    acc = TurnAccumulator(Turn(role="assistant"))
    snapshots = [acc.append(t) for t in ("Hel", "lo wor", "ld.")]
    assert snapshots == ["Hel", "Hello wor", "Hello world."]  # nosec B101
    for prev, nxt in zip(snapshots, snapshots[1:]):
        assert nxt.startswith(prev) and len(nxt) > len(prev)  # nosec B101
    assert acc.chunk_count == 3  # nosec B101
    assert acc.turn.status is TurnStatus.STREAMING  # nosec B101


def test_accumulator_ignores_empty_delta():
    acc = TurnAccumulator(Turn(role="assistant"))
    acc.append("x")
    assert acc.append("") == "x"  # nosec B101
    assert acc.chunk_count == 1  # nosec B101


def test_sealed_turn_rejects_appends():
    acc = TurnAccumulator(Turn(role="assistant"))
    acc.append("partial ")
    turn = acc.seal(content="partial")
    assert turn.is_final and turn.finalized_at is not None  # nosec B101
    assert turn.content == "partial"  # nosec B101
    with pytest.raises(RuntimeError):
        acc.append("late")
    assert turn.content == "partial"  # nosec B101


def test_turn_ids_are_unique_and_increasing():
    ids = [Turn(role="user").id for _ in range(5)]
    assert ids == sorted(ids) and len(set(ids)) == 5  # nosec B101


@pytest.mark.asyncio
async def test_watchdog_fires_once_after_timeout():
    fired = []
    dog = Watchdog("stall", 0.02, lambda: fired.append(1))
    dog.arm()
    assert dog.armed  # nosec B101
    await asyncio.sleep(0.1)
    assert fired == [1]  # nosec B101
    assert dog.fired and not dog.armed  # nosec B101


@pytest.mark.asyncio
async def test_watchdog_reset_postpones_firing():
    fired = []
    dog = Watchdog("stall", 0.15, lambda: fired.append(1))
    dog.arm()
    await asyncio.sleep(0.08)
    dog.reset()
    await asyncio.sleep(0.1)
    assert fired == []  # nosec B101
    await asyncio.sleep(0.15)
    assert fired == [1]  # nosec B101


@pytest.mark.asyncio
async def test_watchdog_cancel_and_token_dispose():
    fired = []
    token = CancellationToken()
    dog = Watchdog("connect", 0.02, lambda: fired.append(1), token=token)
    dog.arm()
    dog.cancel()
    await asyncio.sleep(0.05)
    assert fired == []  # nosec B101
    token.cancel("user")
    dog.arm()
    assert not dog.armed  # nosec B101


@pytest.mark.asyncio
async def test_watchdog_with_non_positive_timeout_is_inert():
    dog = Watchdog("stall", 0, lambda: None)
    dog.arm()
    assert not dog.armed and not dog.enabled  # nosec B101
