"""Tone hints appended to the system instructions for one turn.

``conversation_hint`` looks at the message and where the conversation stands;
``SkillEstimator`` tracks how technical the user's vocabulary is across the
session and turns that into a depth hint.
"""
from __future__ import annotations

from enum import Enum
from threading import Lock
from typing import List, Tuple

from .triggers import is_complex_question, is_simple_message

FAMILIARITY_INTERVAL = 10

HINT_FIRST_MESSAGE = (
    "This is the first message of the conversation. Be welcoming without "
    "ceremony and get straight to being useful."
)
HINT_FOLLOW_UP = (
    "The user is following up. Build on your previous answer and skip "
    "context they already have."
)
HINT_SIMPLE = "This is a short, casual message. Answer briefly and naturally."
HINT_COMPLEX = (
    "This is a complex question. Explain thoroughly, step by step where it "
    "helps, while staying conversational."
)
HINT_FAMILIAR = (
    "The conversation has been going for a while. A more relaxed, familiar "
    "tone is fine."
)


def conversation_hint(user_text: str, is_follow_up: bool, turn_count: int) -> str:
    """Return the bracketed hint block for this turn ("" when none apply)."""
    hints: List[str] = []
    if turn_count == 0:
        hints.append(HINT_FIRST_MESSAGE)
    if is_follow_up:
        hints.append(HINT_FOLLOW_UP)
    if is_simple_message(user_text):
        hints.append(HINT_SIMPLE)
    if is_complex_question(user_text):
        hints.append(HINT_COMPLEX)
    if turn_count > 0 and turn_count % FAMILIARITY_INTERVAL == 0:
        hints.append(HINT_FAMILIAR)
    if not hints:
        return ""
    return "\n[CONVERSATION CONTEXT: " + " ".join(hints) + "]"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


TECH_TERMS: Tuple[str, ...] = (
    "api", "endpoint", "middleware", "async", "await", "promise",
    "callback", "closure", "prototype", "interface", "abstract",
    "polymorphism", "inheritance", "dependency injection",
    "microservice", "docker", "kubernetes", "ci/cd", "pipeline",
    "mutex", "semaphore", "thread", "concurrency", "parallelism",
    "big-o", "complexity", "recursion", "memoization", "dynamic programming",
    "binary tree", "hash map", "linked list", "graph traversal",
    "sql", "nosql", "orm", "migration", "schema", "index",
    "react", "angular", "vue", "svelte", "nextjs", "node",
    "typescript", "webpack", "vite", "babel", "eslint",
)

ADVANCED_DENSITY = 2.0
INTERMEDIATE_DENSITY = 0.5


class SkillEstimator:
    """Running estimate of the user's technical level.

    The estimate is the average number of technical terms per analysed
    message: above 2 is advanced, above 0.5 intermediate, otherwise beginner.
    Until the first message is analysed the level is intermediate.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._messages = 0
        self._terms = 0
        self._level = SkillLevel.INTERMEDIATE

    @property
    def level(self) -> SkillLevel:
        return self._level

    def analyze(self, text: str) -> SkillLevel:
        lower = text.lower()
        matches = sum(1 for term in TECH_TERMS if term in lower)
        with self._lock:
            self._messages += 1
            self._terms += matches
            density = self._terms / self._messages
            if density > ADVANCED_DENSITY:
                self._level = SkillLevel.ADVANCED
            elif density > INTERMEDIATE_DENSITY:
                self._level = SkillLevel.INTERMEDIATE
            else:
                self._level = SkillLevel.BEGINNER
            return self._level

    def depth_hint(self) -> str:
        if self._level is SkillLevel.ADVANCED:
            return (
                "The user appears technically experienced. Technical terminology "
                "is fine and basics can be skipped."
            )
        if self._level is SkillLevel.BEGINNER:
            return (
                "The user appears new to this topic. Explain concepts plainly and "
                "define technical terms as you use them."
            )
        return ""

    def reset(self) -> None:
        with self._lock:
            self._messages = 0
            self._terms = 0
            self._level = SkillLevel.INTERMEDIATE


__all__ = [
    "conversation_hint",
    "SkillLevel",
    "SkillEstimator",
    "TECH_TERMS",
    "FAMILIARITY_INTERVAL",
]
