"""Asyncio client for a server-sent-events chat backend."""

from __future__ import annotations

from .client import (
    CodeModificationResult,
    HealthStatus,
    StreamingChatClient,
    StreamSession,
    StreamState,
)
from .exceptions import (
    CallbackError,
    ChatClientError,
    ChunkParseError,
    CodeModificationError,
    StreamContentTypeError,
    StreamHTTPStatusError,
    StreamTransportError,
)

__all__ = [
    "CallbackError",
    "ChatClientError",
    "ChunkParseError",
    "CodeModificationError",
    "CodeModificationResult",
    "HealthStatus",
    "StreamContentTypeError",
    "StreamHTTPStatusError",
    "StreamSession",
    "StreamState",
    "StreamTransportError",
    "StreamingChatClient",
]

__version__ = "0.1.0"
