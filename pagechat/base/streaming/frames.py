"""Decoded event-stream frames and the per-block decoder.

One upstream event block (text between two blank lines) carries one or more
``data:`` lines. Each line decodes independently to at most one frame:

* the literal ``[DONE]`` sentinel → :class:`DoneFrame`
* a JSON object with an ``error`` key → :class:`ErrorFrame`
* a JSON object with a non-empty string ``text`` → :class:`DeltaFrame`

Everything else (other SSE fields, comments, malformed JSON, empty text) is
skipped. Skips are reported to the caller through ``on_skip`` so one bad frame
never aborts an otherwise healthy stream.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from ..constants import DATA_FIELD_PREFIX, DONE_SENTINEL


@dataclass(frozen=True)
class DeltaFrame:
    text: str


@dataclass(frozen=True)
class ErrorFrame:
    message: str


@dataclass(frozen=True)
class DoneFrame:
    pass


Frame = Union[DeltaFrame, ErrorFrame, DoneFrame]

SkipCallback = Callable[[str, str], None]


def _decode_data(data: str) -> Frame | str:
    """Decode one ``data:`` payload; return a frame or a skip reason."""
    if data == DONE_SENTINEL:
        return DoneFrame()
    try:
        obj = json.loads(data)
    except ValueError:
        return "invalid_json"
    if not isinstance(obj, dict):
        return "not_an_object"
    if "error" in obj and obj["error"] is not None:
        return ErrorFrame(message=str(obj["error"]))
    text = obj.get("text")
    if isinstance(text, str) and text:
        return DeltaFrame(text=text)
    return "no_text"


def decode_event_block(block: str, on_skip: Optional[SkipCallback] = None) -> List[Frame]:
    """Decode a single blank-line-delimited event block into frames.

    Parameters:
        block: Raw block text with ``\\n`` line endings.
        on_skip: Optional ``callback(reason, line)`` invoked for every line
            that did not yield a frame (blank lines excepted).

    Returns:
        Frames in the order their lines appeared.
    """
    frames: List[Frame] = []
    for line in block.split("\n"):
        if not line:
            continue
        if not line.startswith(DATA_FIELD_PREFIX):
            # event:, id:, retry: and ":" comments are not used by this protocol
            if on_skip is not None:
                on_skip("non_data_field", line)
            continue
        data = line[len(DATA_FIELD_PREFIX):].strip()
        decoded = _decode_data(data)
        if isinstance(decoded, str):
            if on_skip is not None:
                on_skip(decoded, line)
            continue
        frames.append(decoded)
    return frames


__all__ = [
    "DeltaFrame",
    "ErrorFrame",
    "DoneFrame",
    "Frame",
    "decode_event_block",
]
