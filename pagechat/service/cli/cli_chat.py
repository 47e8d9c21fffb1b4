"""Streaming chat loop behind the ``chat`` subcommand.

Presentation only: reads lines, hands them to a
:class:`~pagechat.service.conversation.Conversation` and prints the reply as
it grows. Commands inside the loop:

- ``/retry``: resend the last message
- ``/recap``: print a recap of the conversation so far
- ``/clear``: forget the conversation history
- ``/exit`` or ``/quit``: leave
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Callable, Optional, TextIO

from ...base.errors import SessionBusyError
from ...base.models import PageContext, Turn
from ...base.streaming import StreamTransport
from ...config import get_settings
from ...config.defaults import CLI_DEFAULT_PROMPT, CLI_EXIT_COMMANDS
from ..conversation import Conversation
from .cli_utils import suppress_console_logs

InputFn = Callable[[str], str]


class ReplyPrinter:
    """Prints each reply incrementally from the growing content snapshots."""

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._turn_id: Optional[int] = None
        self._printed = 0
        self.last_error = False

    def on_chunk(self, turn_id: int, content: str) -> None:
        if turn_id != self._turn_id:
            self._turn_id = turn_id
            self._printed = 0
        self._out.write(content[self._printed:])
        self._out.flush()
        self._printed = len(content)

    def on_finalize(self, turn: Turn) -> None:
        self.last_error = turn.error
        if turn.error:
            self._out.write(f"\n[error] {turn.content}\n")
        elif turn.id != self._turn_id:
            # nothing was streamed for this turn
            self._out.write(f"{turn.content}\n")
        else:
            self._out.write("\n")
        self._out.flush()
        self._turn_id = None
        self._printed = 0


def load_page(args: argparse.Namespace) -> Optional[PageContext]:
    """Build the page snapshot from ``--title``, ``--url`` and ``--excerpt-file``."""
    excerpt = ""
    if args.excerpt_file:
        excerpt = Path(args.excerpt_file).read_text(encoding="utf-8")
    if not (args.title or args.url or excerpt):
        return None
    return PageContext(title=args.title, url=args.url, excerpt=excerpt, mode=args.mode)


def _read(input_fn: InputFn, prompt: str) -> str:
    try:
        return input_fn(prompt)
    except EOFError:
        return CLI_EXIT_COMMANDS[0]


async def _await_reply(task: "asyncio.Task[Turn]") -> Turn:
    with suppress_console_logs():
        return await task


async def run_chat(
    args: argparse.Namespace,
    *,
    transport: Optional[StreamTransport] = None,
    input_fn: InputFn = input,
    out: Optional[TextIO] = None,
) -> int:
    """Run the chat loop; return the process exit code.

    With ``--message`` the given messages are sent in order and the exit code
    is 1 when the last reply was an error. Otherwise lines are read from
    ``input_fn`` until an exit command or EOF.
    """
    out = out or sys.stdout
    settings = get_settings({"stream_url": args.stream_url})
    page = load_page(args)
    printer = ReplyPrinter(out)
    conversation = Conversation(
        transport,
        settings=settings,
        observer=(lambda: page) if page is not None else None,
        on_chunk=printer.on_chunk,
        on_finalize=printer.on_finalize,
    )
    try:
        if args.message:
            for message in args.message:
                if message.strip():
                    await _await_reply(conversation.submit(message, args.mode))
            return 1 if printer.last_error else 0

        loop = asyncio.get_running_loop()
        while True:
            line = (await loop.run_in_executor(None, _read, input_fn, CLI_DEFAULT_PROMPT)).strip()
            if not line:
                continue
            if line in CLI_EXIT_COMMANDS:
                return 0
            if line == "/clear":
                conversation.context.clear()
                out.write("(history cleared)\n")
                continue
            if line == "/recap":
                out.write((conversation.context.generate_recap() or "(nothing to recap yet)") + "\n")
                continue
            try:
                task = conversation.retry() if line == "/retry" else conversation.submit(line, args.mode)
            except (ValueError, SessionBusyError) as exc:
                out.write(f"[{exc}]\n")
                continue
            await _await_reply(task)
            recap = conversation.recap()
            if recap:
                out.write(recap + "\n")
    finally:
        await conversation.aclose()


__all__ = ["ReplyPrinter", "load_page", "run_chat"]
