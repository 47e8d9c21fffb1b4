"""Streaming package for the engine.

Exposes the frame parser, turn accumulator, watchdog timers, truncation
heuristic and the session controller under a single namespace.
"""

from .frames import DeltaFrame, DoneFrame, ErrorFrame, Frame, decode_event_block
from .frame_parser import FrameParser
from .accumulator import TurnAccumulator
from .watchdog import Watchdog
from .truncation import ContinuationPolicy, TruncationRules, looks_truncated
from .session import SessionController, StreamTransport

__all__ = [
    "DeltaFrame",
    "DoneFrame",
    "ErrorFrame",
    "Frame",
    "decode_event_block",
    "FrameParser",
    "TurnAccumulator",
    "Watchdog",
    "ContinuationPolicy",
    "TruncationRules",
    "looks_truncated",
    "SessionController",
    "StreamTransport",
]
