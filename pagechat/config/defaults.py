"""pagechat.config.defaults
========================

Central place for small, stable default values used by the service layer and
the CLI. These defaults can be overridden via environment variables or an
external configuration file.

This module avoids importing from other pagechat packages to prevent circular
dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Upstream endpoints ----
DEFAULT_STREAM_URL = "http://127.0.0.1:8787/api/chat/stream"
DEFAULT_COMPLETE_URL = "http://127.0.0.1:8787/api/chat"

# ---- CLI Defaults ----
CLI_DEFAULT_PROMPT = "you> "
CLI_EXIT_COMMANDS = ("/exit", "/quit")

__all__ = [
    "DEFAULT_STREAM_URL",
    "DEFAULT_COMPLETE_URL",
    "CLI_DEFAULT_PROMPT",
    "CLI_EXIT_COMMANDS",
]
