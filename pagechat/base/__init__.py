"""
Engine Base Package

Exports the streaming engine and the conversation context manager together
with their shared contracts for use by the service layer.

- Models: turns, page snapshot and wire payloads
- Streaming: frame parser, accumulator, watchdogs, truncation, session
- Context: history, payload builders, classifiers and tone hints
- HTTP: async upstream client
"""

from .models import (
    ChatMessage,
    ChatPayload,
    CompletionEnvelope,
    PageContext,
    SessionState,
    Turn,
    TurnStatus,
)
from .errors import ErrorCode, SessionBusyError, TurnError, classify_exception, user_message
from .timeouts import TimeoutConfig, get_timeout_config
from .cancellation import CancellationToken, CancelledError
from .streaming import (
    ContinuationPolicy,
    FrameParser,
    SessionController,
    StreamTransport,
    TruncationRules,
    TurnAccumulator,
    Watchdog,
    looks_truncated,
)
from .context import ContextLimits, ConversationContext, InstructionSet, SkillEstimator, conversation_hint
from .http import UpstreamClient

__all__ = [
    "ChatMessage",
    "ChatPayload",
    "CompletionEnvelope",
    "PageContext",
    "SessionState",
    "Turn",
    "TurnStatus",
    "ErrorCode",
    "SessionBusyError",
    "TurnError",
    "classify_exception",
    "user_message",
    "TimeoutConfig",
    "get_timeout_config",
    "CancellationToken",
    "CancelledError",
    "ContinuationPolicy",
    "FrameParser",
    "SessionController",
    "StreamTransport",
    "TruncationRules",
    "TurnAccumulator",
    "Watchdog",
    "looks_truncated",
    "ContextLimits",
    "ConversationContext",
    "InstructionSet",
    "SkillEstimator",
    "conversation_hint",
    "UpstreamClient",
]
