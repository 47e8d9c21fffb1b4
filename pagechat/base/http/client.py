"""Async HTTP transport for the upstream generation endpoints.

Purpose:
    Wrap an ``httpx.AsyncClient`` behind the two calls the engine needs: the
    streaming endpoint (event-stream body read slice by slice) and its
    non-streaming sibling (single JSON envelope). Status failures are turned
    into :class:`~pagechat.base.errors.TurnError` so the session controller
    deals with one exception type.

Timeout strategy:
    The connect phase and overall read bound come from
    :func:`get_timeout_config`. The session controller still owns the connect
    and stall watchdogs; the client timeouts are a backstop that is looser
    than both.

Lifecycle:
    The client owns its ``httpx.AsyncClient`` unless one is injected. Close it
    with :meth:`UpstreamClient.aclose` or use it as an async context manager.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Mapping, Optional

import httpx
from pydantic import BaseModel, ValidationError

from ..cancellation import CancellationToken
from ..errors import ErrorCode, TurnError, classify_exception, classify_status, user_message
from ..logging import get_logger, log_event
from ..models import CompletionEnvelope
from ..timeouts import TimeoutConfig, get_timeout_config

_logger = get_logger("pagechat.http")

EVENT_STREAM_HEADERS = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}


def to_wire(payload: Any) -> Dict[str, Any]:
    """Return the JSON body for ``payload`` (model or mapping)."""
    to_wire_fn = getattr(payload, "to_wire", None)
    if callable(to_wire_fn):
        return to_wire_fn()
    if isinstance(payload, BaseModel):
        return payload.model_dump(by_alias=True)
    if isinstance(payload, Mapping):
        return dict(payload)
    raise TypeError(f"unsupported payload type: {type(payload).__name__}")


def _status_error(status: int) -> TurnError:
    code = classify_status(status)
    return TurnError(code=code, message=user_message(code, status), status=status)


class UpstreamClient:
    """Client for the streaming and non-streaming generation endpoints.

    Parameters:
        stream_url: Endpoint answering with an event stream.
        complete_url: Optional non-streaming sibling endpoint.
        timeouts: Override for :func:`get_timeout_config`.
        headers: Extra headers sent with every request.
        client: Pre-built ``httpx.AsyncClient`` (not closed by ``aclose``).
        transport: Custom ``httpx`` transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        stream_url: str,
        complete_url: Optional[str] = None,
        *,
        timeouts: Optional[TimeoutConfig] = None,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.stream_url = stream_url
        self.complete_url = complete_url
        cfg = timeouts or get_timeout_config()
        self._owns_client = client is None
        if client is None:
            timeout = httpx.Timeout(cfg.http_timeout_seconds, connect=cfg.connect_timeout_seconds)
            client = httpx.AsyncClient(timeout=timeout, headers=dict(headers or {}), transport=transport)
        self._client = client

    async def __aenter__(self) -> "UpstreamClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @asynccontextmanager
    async def stream(
        self, payload: Any, token: Optional[CancellationToken] = None
    ) -> AsyncIterator[AsyncIterator[str]]:
        """POST ``payload`` and yield an iterator over decoded body slices.

        Entering the context waits for the response headers.

        Raises:
            TurnError: non-success status.
            httpx.HTTPError: transport failures (classified by the session).
        """
        body = to_wire(payload)
        async with self._client.stream(
            "POST", self.stream_url, json=body, headers=EVENT_STREAM_HEADERS
        ) as response:
            if response.status_code >= 400:
                log_event(_logger, "http.stream.status", status=response.status_code, url=self.stream_url)
                raise _status_error(response.status_code)
            yield self._iter_text(response, token)

    @staticmethod
    async def _iter_text(
        response: httpx.Response, token: Optional[CancellationToken]
    ) -> AsyncIterator[str]:
        async for text in response.aiter_text():
            if token is not None and token.cancelled:
                break
            if text:
                yield text

    async def complete(self, payload: Any) -> CompletionEnvelope:
        """Call the non-streaming endpoint and return its envelope.

        Raises:
            TurnError: missing endpoint, transport failure, non-success
                status or a malformed envelope.
        """
        if not self.complete_url:
            raise TurnError(ErrorCode.UNKNOWN, "No completion endpoint configured.")
        try:
            response = await self._client.post(self.complete_url, json=to_wire(payload))
        except httpx.HTTPError as exc:
            code = classify_exception(exc)
            raise TurnError(code, user_message(code), raw=exc) from exc
        if response.status_code >= 400:
            log_event(_logger, "http.complete.status", status=response.status_code, url=self.complete_url)
            raise _status_error(response.status_code)
        try:
            return CompletionEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TurnError(
                ErrorCode.UPSTREAM_ERROR,
                user_message(ErrorCode.UPSTREAM_ERROR, response.status_code),
                status=response.status_code,
                raw=exc,
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["UpstreamClient", "EVENT_STREAM_HEADERS", "to_wire"]
