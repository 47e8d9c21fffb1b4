# -*- coding: utf-8 -*-
"""Utility helpers shared by the CLI chat loop.

Functions
---------
- ``parse_verbosity(value)``: Map user strings and synonyms to a canonical
  logging level name.
- ``suppress_console_logs()``: Context manager that detaches console handlers
  from the ``pagechat`` loggers while a reply is printed, so JSON log lines do
  not interleave with streamed text. File handlers stay attached.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Iterator, List, Optional, Tuple

from ...base.logging import BASE_LOGGER_NAME

_LEVEL_SYNONYMS = {
    "debug": "DEBUG",
    "verbose": "DEBUG",
    "info": "INFO",
    "warning": "WARNING",
    "warn": "WARNING",
    "error": "ERROR",
    "quiet": "ERROR",
    "critical": "CRITICAL",
    "silent": "CRITICAL",
}


def parse_verbosity(value: str) -> Optional[str]:
    """Return the canonical level name for ``value`` or ``None`` if unknown."""
    return _LEVEL_SYNONYMS.get(value.strip().lower())


@contextlib.contextmanager
def suppress_console_logs() -> Iterator[None]:
    """Temporarily detach console handlers from the ``pagechat`` loggers.

    Handlers tagged as managed file handlers are left untouched. Original
    handlers are restored on exit.
    """
    detached: List[Tuple[logging.Logger, logging.Handler]] = []
    names = [BASE_LOGGER_NAME] + [
        name
        for name, obj in list(logging.Logger.manager.loggerDict.items())
        if isinstance(obj, logging.Logger) and name.startswith(BASE_LOGGER_NAME + ".")
    ]
    try:
        for name in names:
            lg = logging.getLogger(name)
            for handler in list(lg.handlers):
                if getattr(handler, "_pagechat_file_handler", False):
                    continue
                if isinstance(handler, logging.StreamHandler):
                    with contextlib.suppress(ValueError, OSError):
                        handler.flush()
                    detached.append((lg, handler))
                    lg.removeHandler(handler)
        yield
    finally:
        for lg, handler in detached:
            lg.addHandler(handler)


__all__ = ["parse_verbosity", "suppress_console_logs"]
