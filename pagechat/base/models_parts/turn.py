"""
Turn DTO shared by the session controller and the context manager.

A turn is created on user submission or when the session starts an assistant
reply. Its ``content`` only grows while the turn is in flight and becomes
immutable once :meth:`Turn.seal` has run; ownership then passes to the
conversation history.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Optional

from .session_state import TurnStatus

Role = Literal["user", "assistant"]

_TURN_IDS = itertools.count(1)


def next_turn_id() -> int:
    """Return a process-wide unique, monotonically increasing turn id."""
    return next(_TURN_IDS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Turn:
    """One logical exchange unit of a conversation.

    Attributes:
        id: Unique, monotonic identifier.
        role: ``"user"`` or ``"assistant"``.
        content: Text of the turn; append-only while streaming.
        status: Current :class:`TurnStatus`.
        chunk_count: Number of deltas appended.
        created_at: Creation timestamp (UTC).
        finalized_at: Set when the turn is sealed.
        error: True when the turn ended in a hard failure; ``content`` then
            holds a short human-readable message (or the partial reply).
        error_code: The :class:`~pagechat.base.errors.ErrorCode` value that
            ended the turn, soft outcomes included (``None`` on success).
    """

    role: Role
    content: str = ""
    id: int = field(default_factory=next_turn_id)
    status: TurnStatus = TurnStatus.PENDING
    chunk_count: int = 0
    created_at: datetime = field(default_factory=_utcnow)
    finalized_at: Optional[datetime] = None
    error: bool = False
    error_code: Optional[str] = None

    @classmethod
    def finalized(cls, role: Role, content: str) -> "Turn":
        """Build an already-sealed turn (user submissions, recorded replies)."""
        turn = cls(role=role, content=content)
        turn.seal()
        return turn

    @property
    def is_final(self) -> bool:
        return self.status.terminal

    @property
    def was_error(self) -> bool:
        return self.error

    def append(self, text: str) -> str:
        """Append ``text`` and return the new content snapshot."""
        if self.is_final:
            raise RuntimeError(f"turn {self.id} is sealed; cannot append")
        self.content += text
        self.chunk_count += 1
        self.status = TurnStatus.STREAMING
        return self.content

    def seal(self, *, error: bool = False, error_code: Optional[str] = None, content: Optional[str] = None) -> None:
        """Finalize the turn; further mutation raises ``RuntimeError``."""
        if self.is_final:
            raise RuntimeError(f"turn {self.id} is already sealed")
        if content is not None:
            self.content = content
        self.error = error
        self.error_code = error_code
        self.status = TurnStatus.ERROR if error else TurnStatus.FINALIZED
        self.finalized_at = _utcnow()

    def as_message(self) -> dict:
        return {"role": self.role, "content": self.content}


__all__ = ["Turn", "Role", "next_turn_id"]
