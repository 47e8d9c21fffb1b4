"""Incremental event-stream frame parser.

The transport hands over arbitrary slices of the response body; frames may
be split across reads at any byte. :class:`FrameParser` buffers the pending
tail and only decodes complete blocks (terminated by a blank line). The
remaining tail is decoded by :meth:`FrameParser.flush` once the stream closes.
"""
from __future__ import annotations

import codecs
import logging
from typing import List, Optional

from ..logging import LogContext, get_logger, log_event
from .frames import Frame, decode_event_block

_logger = get_logger("pagechat.streaming.parser")

_BOUNDARY = "\n\n"


def _normalize(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


class FrameParser:
    """Stateful splitter turning body chunks into ordered frames.

    Frames are never reordered or deduplicated. Malformed lines are counted in
    :attr:`skipped` and logged at debug level as ``stream.frame.skip``.
    """

    def __init__(self, *, ctx: Optional[LogContext] = None, encoding: str = "utf-8") -> None:
        self._buffer = ""
        self._carry = ""
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._ctx = ctx
        self.skipped = 0

    @property
    def pending(self) -> str:
        """Buffered text not yet terminated by a frame boundary."""
        return self._buffer

    def feed(self, data: str | bytes) -> List[Frame]:
        """Add a body slice and return frames completed by it."""
        if isinstance(data, (bytes, bytearray)):
            text = self._decoder.decode(bytes(data))
        else:
            text = data
        if not text:
            return []
        combined = self._carry + text
        # a CR at the end of a slice may be the first half of a CRLF pair
        self._carry = "\r" if combined.endswith("\r") else ""
        if self._carry:
            combined = combined[:-1]
        self._buffer += _normalize(combined)
        frames: List[Frame] = []
        while True:
            idx = self._buffer.find(_BOUNDARY)
            if idx < 0:
                break
            block = self._buffer[:idx]
            self._buffer = self._buffer[idx + len(_BOUNDARY):]
            frames.extend(decode_event_block(block, self._on_skip))
        return frames

    def flush(self) -> List[Frame]:
        """Decode whatever remains buffered and reset the parser."""
        tail = self._decoder.decode(b"", final=True)
        block = self._buffer + _normalize(self._carry + tail)
        self._buffer = ""
        self._carry = ""
        if not block.strip():
            return []
        return decode_event_block(block, self._on_skip)

    def _on_skip(self, reason: str, line: str) -> None:
        self.skipped += 1
        log_event(
            _logger,
            "stream.frame.skip",
            self._ctx,
            level=logging.DEBUG,
            reason=reason,
            line=line[:200],
        )


__all__ = ["FrameParser"]
