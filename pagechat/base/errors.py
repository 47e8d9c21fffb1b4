"""Turn error taxonomy public surface.

Re-exports the implementations under ``pagechat.base.errors_parts`` to keep
a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.turn_error import SessionBusyError, TurnError
from .errors_parts.classification import classify_exception, classify_status
from .errors_parts.messages import user_message

__all__ = [
    "ErrorCode",
    "TurnError",
    "SessionBusyError",
    "classify_exception",
    "classify_status",
    "user_message",
]
