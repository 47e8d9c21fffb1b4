"""CLI parser construction for pagechat.

This module wires subparsers but contains no execution logic. The chat loop
lives in ``cli_chat``.
"""

from __future__ import annotations

import argparse

from ...base.constants import DEFAULT_MODE


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with the ``chat`` subcommand.
    """
    p = argparse.ArgumentParser(prog="pagechat", description="Streaming page-aware chat client")
    sub = p.add_subparsers(dest="cmd")

    p_chat = sub.add_parser("chat", help="Interactive streaming chat (default)")
    p_chat.add_argument("--stream-url", default=None, help="Streaming endpoint (overrides config)")
    p_chat.add_argument("--title", default="", help="Title of the page being discussed")
    p_chat.add_argument("--url", default="", help="URL of the page being discussed")
    p_chat.add_argument("--excerpt-file", default=None, help="Text file holding the page content")
    p_chat.add_argument("--mode", default=DEFAULT_MODE, help="Page mode label")
    p_chat.add_argument("--message", action="append", default=None, help="Send this message and exit (repeatable)")
    p_chat.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
    p_chat.add_argument("--log-file", default=None, help="Also write JSON logs to this file")

    return p


__all__ = ["build_parser"]
