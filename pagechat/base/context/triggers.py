"""Pure text classifiers over user messages.

All checks are case-insensitive substring or prefix tests; none of them
touch history or perform I/O.
"""
from __future__ import annotations

import re
from typing import Tuple

# phrases that mean "look at the page I'm on"
PAGE_QUERY_TRIGGERS: Tuple[str, ...] = (
    "page",
    "this",
    "explain",
    "analyze",
    "summarize",
    "what is",
    "what does",
    "what about",
    "tell me about",
    "review",
    "key points",
    "key insights",
    "summary",
    "break down",
)

FOLLOW_UP_MARKERS: Tuple[str, ...] = (
    "what about",
    "how about",
    "and ",
    "also",
    "but ",
    "why",
    "can you",
    "what if",
    "is that",
    "so ",
    "then",
    "ok ",
    "okay",
    "got it",
    "makes sense",
    "interesting",
    "wait",
    "hold on",
    "actually",
    "one more",
    "another",
    "more about",
    "elaborate",
    "explain more",
    "go deeper",
    "what do you mean",
    "could you",
    "can you clarify",
    "tell me more",
)

COMPLEX_MARKERS: Tuple[str, ...] = (
    "explain",
    "how does",
    "why does",
    "what happens when",
    "difference between",
    "compare",
    "pros and cons",
    "architecture",
    "design pattern",
    "trade-off",
    "tradeoff",
    "best practice",
    "optimize",
    "debug",
    "refactor",
    "step by step",
    "walk me through",
    "deep dive",
    "under the hood",
    "internals",
    "implement",
)

_SIMPLE_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"^(hi|hello|hey|sup|yo)\b",
        r"^(thanks|thank you|thx|ty)\b",
        r"^(ok|okay|got it|makes sense|cool|nice|great)\b",
        r"^(yes|no|yep|nope|yeah|nah)\b",
        r"^what('s| is) \d",
    )
)

SIMPLE_MAX_CHARS = 15
COMPLEX_MIN_WORDS = 25


def word_count(text: str) -> int:
    return len(text.split())


def is_page_query(text: str) -> bool:
    """True when ``text`` refers to the viewed page."""
    lower = text.lower()
    return any(trigger in lower for trigger in PAGE_QUERY_TRIGGERS)


def follow_up_signal(text: str) -> bool:
    """True when ``text`` contains one of the follow-up markers."""
    lower = text.lower()
    return any(marker in lower for marker in FOLLOW_UP_MARKERS)


def is_simple_message(text: str) -> bool:
    """Greetings, acknowledgements and very short messages."""
    lower = text.lower().strip()
    if len(lower) < SIMPLE_MAX_CHARS:
        return True
    return any(p.search(lower) for p in _SIMPLE_PATTERNS)


def is_complex_question(text: str) -> bool:
    lower = text.lower()
    if any(marker in lower for marker in COMPLEX_MARKERS):
        return True
    return word_count(text) > COMPLEX_MIN_WORDS


__all__ = [
    "PAGE_QUERY_TRIGGERS",
    "FOLLOW_UP_MARKERS",
    "COMPLEX_MARKERS",
    "word_count",
    "is_page_query",
    "follow_up_signal",
    "is_simple_message",
    "is_complex_question",
]
