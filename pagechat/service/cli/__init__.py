"""pagechat CLI (package entrypoint).

This package wires argument parsing to the chat loop kept in ``cli_chat``.
It performs no streaming logic directly.

Public API re-exports:
- ``main``: CLI entrypoint callable
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

from ...base.logging import configure_logger
from .cli_chat import run_chat
from .cli_parser import build_parser
from .cli_utils import parse_verbosity

_SUBCOMMANDS = {"chat"}


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    p = build_parser()
    # inject the default subcommand "chat" when omitted
    argv_list = list(sys.argv[1:] if argv is None else argv)
    if not argv_list or argv_list[0] not in _SUBCOMMANDS:
        argv_list = ["chat"] + argv_list
    args = p.parse_args(argv_list)

    level = parse_verbosity(args.log_level) if args.log_level else None
    if args.log_level and level is None:
        p.error(f"unknown log level: {args.log_level}")
    if level is not None or args.log_file:
        configure_logger(level=level, file_path=args.log_file)
    try:
        return asyncio.run(run_chat(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
