"""
Error types for the chat backend client.

Stream failures are never raised to the code that opened a stream; they are
delivered through the session's ``on_error`` callback. The same types are
raised directly by the request/response operations and by ``stream_chat``.
"""

from __future__ import annotations


class ChatClientError(Exception):
    """Base chat client error with request context."""

    def __init__(
        self,
        message: str,
        session_id: int | str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.session_id = session_id
        self.status_code = status_code


class ChunkParseError(ChatClientError):
    """An event arrived without a usable data payload."""

    def __init__(
        self,
        message: str,
        event_name: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.event_name = event_name


class StreamTransportError(ChatClientError):
    """The event stream failed while it was still connecting or open."""
    pass


class StreamHTTPStatusError(StreamTransportError):
    """The chat endpoint answered with a status other than 200."""

    def __init__(
        self,
        message: str,
        body: str = "",
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.body = body


class StreamContentTypeError(StreamTransportError):
    """The chat endpoint answered with something other than an event stream."""

    def __init__(
        self,
        message: str,
        content_type: str = "",
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.content_type = content_type


class CallbackError(ChatClientError):
    """A caller-supplied chunk callback raised."""
    pass


class CodeModificationError(ChatClientError):
    """The modify-code endpoint failed or returned no modified code."""

    def __init__(
        self,
        message: str,
        response_data: dict | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.response_data = response_data or {}
