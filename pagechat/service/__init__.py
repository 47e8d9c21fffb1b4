"""Service layer: the wired conversation facade and the CLI."""

from .conversation import Conversation

__all__ = ["Conversation"]
