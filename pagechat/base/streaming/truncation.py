"""Truncation heuristic and the bounded continuation policy.

A reply "looks truncated" when it is long enough to judge, does not end on a
terminal character, and its last line is a non-trivial fragment without
closing punctuation. Both helpers are pure functions of the reply text.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet

from ..constants import MAX_CONTINUATIONS, TRUNCATION_MIN_FRAGMENT, TRUNCATION_MIN_LENGTH

# closing typographic quotes count as terminal too
_TERMINAL_CHARS = frozenset(".!?\n]})`\"'”’")
_FRAGMENT_END_CHARS = frozenset(".!?:;)]}`\"'”’")


@dataclass(frozen=True)
class TruncationRules:
    min_length: int = TRUNCATION_MIN_LENGTH
    min_fragment: int = TRUNCATION_MIN_FRAGMENT
    terminal_chars: FrozenSet[str] = field(default=_TERMINAL_CHARS)
    fragment_end_chars: FrozenSet[str] = field(default=_FRAGMENT_END_CHARS)


DEFAULT_RULES = TruncationRules()


def looks_truncated(text: str, rules: TruncationRules = DEFAULT_RULES) -> bool:
    """Return True when ``text`` appears to have been cut off mid-thought.

    Examples:
        >>> looks_truncated("The function first loads the data and then we")
        True
        >>> looks_truncated("The function loads the data and is done.")
        False
        >>> looks_truncated("ok")
        False
    """
    if not text or len(text) < rules.min_length:
        return False
    if text[-1] in rules.terminal_chars:
        return False
    fragment = text.rsplit("\n", 1)[-1].strip()
    if len(fragment) <= rules.min_fragment:
        return False
    return fragment[-1] not in rules.fragment_end_chars


@dataclass(frozen=True)
class ContinuationPolicy:
    """Decide whether a finalized reply gets an automatic continuation.

    ``max_attempts`` caps continuations per logical turn; the default of one
    means a second truncation detection finalizes with the partial content.
    """

    max_attempts: int = MAX_CONTINUATIONS
    rules: TruncationRules = DEFAULT_RULES

    def should_continue(self, text: str, attempts: int) -> bool:
        if attempts >= self.max_attempts:
            return False
        return looks_truncated(text, self.rules)


__all__ = [
    "TruncationRules",
    "DEFAULT_RULES",
    "looks_truncated",
    "ContinuationPolicy",
]
