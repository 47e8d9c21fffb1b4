"""
Page context snapshot supplied by the page-observer collaborator.

The observer hands over ``{title, url, textContent, mode}``; the model keeps
the excerpt bounded and is replaced wholesale on navigation.
"""
from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from ..constants import DEFAULT_MODE, MAX_EXCERPT_CHARS


class PageContext(BaseModel):
    """Read-only snapshot of the viewed document.

    Attributes:
        title: Document title.
        url: Document URL.
        excerpt: Extracted text, truncated to ``MAX_EXCERPT_CHARS``.
        mode: Page mode label (e.g. ``"GitHub Analysis"``).
    """

    model_config = ConfigDict(frozen=True)

    title: str = ""
    url: str = ""
    excerpt: str = ""
    mode: str = DEFAULT_MODE

    @field_validator("excerpt")
    @classmethod
    def _cap_excerpt(cls, value: str) -> str:
        return value[:MAX_EXCERPT_CHARS]

    @field_validator("mode")
    @classmethod
    def _default_mode(cls, value: str) -> str:
        return value or DEFAULT_MODE

    @classmethod
    def from_observer(cls, data: "PageContext | Mapping[str, Any]") -> "PageContext":
        """Build from the observer mapping (``textContent`` or ``excerpt`` key)."""
        if isinstance(data, PageContext):
            return data
        excerpt = data.get("textContent")
        if excerpt is None:
            excerpt = data.get("excerpt", "")
        return cls(
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            excerpt=str(excerpt or ""),
            mode=str(data.get("mode") or DEFAULT_MODE),
        )


__all__ = ["PageContext"]
