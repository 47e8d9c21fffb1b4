"""Scripted stream transport and frame builders for session tests.

``ScriptedTransport`` mimics :class:`pagechat.base.http.UpstreamClient`: each
call to ``stream`` consumes the next :class:`Script`, which describes what the
fake upstream does (status failure, slow headers, chunks, mid-stream failure
or hanging open).
"""
from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, List, Optional, Sequence, Union

from pagechat.base.cancellation import CancellationToken
from pagechat.base.errors import TurnError, classify_status, user_message

Chunk = Union[str, bytes]


def sse(*texts: str) -> str:
    """Encode ``texts`` as consecutive delta frames."""
    return "".join(f"data: {json.dumps({'text': t})}\n\n" for t in texts)


def sse_error(message: str) -> str:
    return f"data: {json.dumps({'error': message})}\n\n"


DONE = "data: [DONE]\n\n"


@dataclass
class Script:
    chunks: Sequence[Chunk] = ()
    status: Optional[int] = None
    connect_delay: float = 0.0
    chunk_delay: float = 0.0
    raise_after: Optional[BaseException] = None
    fail_on_enter: Optional[BaseException] = None
    hang: bool = False


class ScriptedTransport:
    def __init__(self, *scripts: Script) -> None:
        self.scripts: List[Script] = list(scripts)
        self.payloads: List[Any] = []
        self.tokens: List[CancellationToken] = []
        self.closed_streams = 0

    @property
    def calls(self) -> int:
        return len(self.payloads)

    @asynccontextmanager
    async def stream(self, payload: Any, token: CancellationToken) -> AsyncIterator[AsyncIterator[Chunk]]:
        self.payloads.append(payload)
        self.tokens.append(token)
        script = self.scripts.pop(0) if self.scripts else Script(chunks=[DONE])
        try:
            if script.connect_delay:
                await asyncio.sleep(script.connect_delay)
            if script.fail_on_enter is not None:
                raise script.fail_on_enter
            if script.status is not None:
                code = classify_status(script.status)
                raise TurnError(code, user_message(code, script.status), status=script.status)
            yield self._body(script)
        finally:
            self.closed_streams += 1

    @staticmethod
    async def _body(script: Script) -> AsyncIterator[Chunk]:
        for chunk in script.chunks:
            await asyncio.sleep(script.chunk_delay)
            yield chunk
        if script.raise_after is not None:
            raise script.raise_after
        if script.hang:
            await asyncio.sleep(3600)


class Recorder:
    """Collects session callbacks."""

    def __init__(self) -> None:
        self.chunks: List[tuple] = []
        self.finalized: List[Any] = []
        self.states: List[Any] = []

    def on_chunk(self, turn_id: int, content: str) -> None:
        self.chunks.append((turn_id, content))

    def on_finalize(self, turn: Any) -> None:
        self.finalized.append(turn)

    def on_state_change(self, state: Any) -> None:
        self.states.append(state)

    @property
    def contents(self) -> List[str]:
        return [c for _, c in self.chunks]


async def wait_for(predicate, timeout: float = 1.0, interval: float = 0.005) -> None:
    """Yield to the loop until ``predicate()`` is true (fails after ``timeout``)."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(interval)


__all__ = ["sse", "sse_error", "DONE", "Script", "ScriptedTransport", "Recorder", "wait_for"]
