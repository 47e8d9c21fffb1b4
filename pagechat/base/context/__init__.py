"""Conversation context package: history, payload builders, text classifiers
and tone hints."""

from .limits import ContextLimits
from .instructions import CORE_INSTRUCTIONS, MODE_INSTRUCTIONS, InstructionSet, DEFAULT_INSTRUCTIONS
from .triggers import (
    follow_up_signal,
    is_complex_question,
    is_page_query,
    is_simple_message,
    word_count,
)
from .hints import SkillEstimator, SkillLevel, conversation_hint
from .manager import ConversationContext

__all__ = [
    "ContextLimits",
    "CORE_INSTRUCTIONS",
    "MODE_INSTRUCTIONS",
    "InstructionSet",
    "DEFAULT_INSTRUCTIONS",
    "follow_up_signal",
    "is_complex_question",
    "is_page_query",
    "is_simple_message",
    "word_count",
    "SkillEstimator",
    "SkillLevel",
    "conversation_hint",
    "ConversationContext",
]
