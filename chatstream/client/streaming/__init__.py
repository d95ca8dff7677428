"""
Server-sent event transport for the chat client.

This package contains:
- Line-oriented SSE parsing
- An EventSource-style connection with an observable ready state
"""

from __future__ import annotations

from .connection import HTTP_OK, EventSourceConnection
from .models import DEFAULT_EVENT, ParserStats, ReadyState, ServerSentEvent
from .parser import SSEParser

__all__ = [
    "DEFAULT_EVENT",
    "EventSourceConnection",
    "HTTP_OK",
    "ParserStats",
    "ReadyState",
    "SSEParser",
    "ServerSentEvent",
]
