"""Append-only accumulation of deltas into the in-flight assistant turn."""
from __future__ import annotations

from typing import Optional

from ..models import Turn


class TurnAccumulator:
    """Owns the mutable content of exactly one in-flight :class:`Turn`.

    Every non-empty delta extends the content, so consecutive snapshots are
    strict prefix extensions of each other. Once :meth:`seal` runs the turn is
    immutable and further appends raise ``RuntimeError``.
    """

    def __init__(self, turn: Turn) -> None:
        self._turn = turn

    @property
    def turn(self) -> Turn:
        return self._turn

    @property
    def snapshot(self) -> str:
        return self._turn.content

    @property
    def chunk_count(self) -> int:
        return self._turn.chunk_count

    @property
    def sealed(self) -> bool:
        return self._turn.is_final

    def append(self, text: str) -> str:
        """Append ``text`` and return the new content (empty deltas ignored)."""
        if self.sealed:
            raise RuntimeError(f"turn {self._turn.id} is sealed; delta discarded")
        if not text:
            return self._turn.content
        return self._turn.append(text)

    def seal(
        self,
        *,
        error: bool = False,
        error_code: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Turn:
        """Finalize the turn and return it.

        ``content`` replaces the accumulated text (used for trimming and for
        error messages); otherwise the accumulated text is kept.
        """
        self._turn.seal(error=error, error_code=error_code, content=content)
        return self._turn


__all__ = ["TurnAccumulator"]
