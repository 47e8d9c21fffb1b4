"""HTTP transport package.

Exposes the async upstream client used by the session controller.
"""

from .client import EVENT_STREAM_HEADERS, UpstreamClient, to_wire

__all__ = ["UpstreamClient", "EVENT_STREAM_HEADERS", "to_wire"]
