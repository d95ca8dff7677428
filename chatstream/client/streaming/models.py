"""
Dataclasses for server-sent event parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_EVENT = "message"


class ReadyState(Enum):
    """Transport-level connection state, mirroring EventSource.readyState."""
    CONNECTING = 0
    OPEN = 1
    CLOSED = 2


@dataclass(frozen=True)
class ServerSentEvent:
    """One dispatched event block."""
    event: str = DEFAULT_EVENT
    data: str = ""
    id: str | None = None
    retry: int | None = None
    has_data: bool = True

    @property
    def is_message(self) -> bool:
        """True for events delivered to a default message listener."""
        return self.event == DEFAULT_EVENT


@dataclass
class PendingEvent:
    """Mutable buffer for the event block currently being read."""
    event: str | None = None
    data_lines: list[str] | None = None
    id: str | None = None
    retry: int | None = None
    has_fields: bool = False

    def reset(self) -> None:
        self.event = None
        self.data_lines = None
        self.id = None
        self.retry = None
        self.has_fields = False

    @property
    def is_empty(self) -> bool:
        return not self.has_fields


@dataclass(frozen=True)
class ParserStats:
    """Counters for streaming diagnostics."""
    total_events: int
    heartbeats: int
    parse_errors: int
    discarded_blocks: int
