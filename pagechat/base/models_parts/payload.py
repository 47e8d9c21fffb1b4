"""
Pydantic wire models for the upstream generation endpoints.

The streaming and non-streaming endpoints accept the same body:
``{"systemInstructions": str, "messages": [{"role", "content"}], "mode": str}``.
The non-streaming sibling answers with ``{success, response|error, mode}``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChatMessage(BaseModel):
    """One ``{role, content}`` entry of the outbound message list."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class ChatPayload(BaseModel):
    """Outbound request body for one turn or continuation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    system_instructions: str = Field(alias="systemInstructions")
    messages: List[ChatMessage]
    mode: str

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-ready body using the wire field names."""
        return self.model_dump(by_alias=True)


class CompletionEnvelope(BaseModel):
    """Response envelope of the non-streaming endpoint.

    Failure Modes:
        ``success=True`` without ``response`` or ``success=False`` without
        ``error`` raise ``ValidationError``.
    """

    success: bool
    response: Optional[str] = None
    error: Optional[str] = None
    mode: Optional[str] = None

    @model_validator(mode="after")
    def _check_shape(self) -> "CompletionEnvelope":
        if self.success and self.response is None:
            raise ValueError("successful envelope must carry 'response'")
        if not self.success and not self.error:
            raise ValueError("failed envelope must carry 'error'")
        return self


__all__ = ["ChatMessage", "ChatPayload", "CompletionEnvelope"]
