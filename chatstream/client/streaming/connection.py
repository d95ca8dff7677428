"""
EventSource-style connection over an httpx streaming response.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import structlog

from chatstream.exceptions import (
    StreamContentTypeError,
    StreamHTTPStatusError,
)

from .models import ReadyState, ServerSentEvent
from .parser import SSEParser

HTTP_OK = 200
EVENT_STREAM = "text/event-stream"

logger = structlog.get_logger(__name__)


class EventSourceConnection:
    """
    One GET request answered with ``text/event-stream``.

    ``ready_state`` is CONNECTING until the response has been validated,
    OPEN while the body is being read, and CLOSED once the connection was
    closed locally or the body has been fully consumed.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict[str, Any] | None = None,
        *,
        headers: dict[str, str] | None = None,
        parser: SSEParser | None = None,
    ):
        self._client = client
        self._request = client.build_request(
            "GET",
            url,
            params=params,
            headers={
                "Accept": EVENT_STREAM,
                "Cache-Control": "no-cache",
                **(headers or {}),
            },
        )
        self.parser = parser or SSEParser()
        self._response: httpx.Response | None = None
        self._opened = False
        self._closed = False

    @property
    def url(self) -> httpx.URL:
        return self._request.url

    @property
    def ready_state(self) -> ReadyState:
        if self._closed:
            return ReadyState.CLOSED
        if not self._opened or self._response is None:
            return ReadyState.CONNECTING
        if self._response.is_closed:
            return ReadyState.CLOSED
        return ReadyState.OPEN

    async def connect(self) -> None:
        """Send the request and validate the response head."""
        response = await self._client.send(self._request, stream=True)
        self._response = response

        if response.status_code != HTTP_OK:
            body = (await response.aread()).decode("utf-8", errors="replace")
            raise StreamHTTPStatusError(
                f"HTTP Error: {response.status_code}",
                body=body,
                status_code=response.status_code,
            )

        content_type = response.headers.get("content-type", "")
        if EVENT_STREAM not in content_type.lower():
            await response.aclose()
            raise StreamContentTypeError(
                f"Expected {EVENT_STREAM} response, got content-type: {content_type!r}",
                content_type=content_type,
                status_code=response.status_code,
            )

        self._opened = True
        logger.debug("Event stream connected", url=str(self.url))

    async def events(self) -> AsyncGenerator[ServerSentEvent]:
        """Yield dispatched events until the server ends the body."""
        if self._response is None or not self._opened:
            raise RuntimeError("connect() must complete before reading events")

        async for line in self._response.aiter_lines():
            event = self.parser.feed_line(line)
            if event is not None:
                yield event

        if self.parser.flush():
            logger.debug(
                "Discarded incomplete event block at end of stream",
                url=str(self.url),
            )

    def mark_closed(self) -> None:
        """Flag the connection as closed; ``aclose`` releases the socket."""
        self._closed = True

    async def aclose(self) -> None:
        """Close the connection. Safe to call more than once."""
        self._closed = True
        if self._response is not None and not self._response.is_closed:
            await self._response.aclose()
