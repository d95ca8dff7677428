"""
Line-oriented server-sent event parser.

Follows the EventSource interpretation rules: a blank line dispatches the
pending block, lines starting with ``:`` are comments (used by servers as
heartbeats), and ``field: value`` lines fill the block. Payloads are kept as
raw text; no JSON envelope is assumed.
"""

from __future__ import annotations

from .models import (
    DEFAULT_EVENT,
    ParserStats,
    PendingEvent,
    ServerSentEvent,
)


class SSEParser:
    """Incremental SSE parser fed one decoded line at a time."""

    def __init__(self):
        self._pending = PendingEvent()
        self.last_event_id: str | None = None
        self.reconnection_time: int | None = None
        self.stats = {
            'total_events': 0,
            'heartbeats': 0,
            'parse_errors': 0,
            'discarded_blocks': 0,
        }

    def feed_line(self, line: str) -> ServerSentEvent | None:
        """
        Consume one line (without its terminator).

        Returns the dispatched event when ``line`` is the blank line closing
        a block that carries an event, otherwise ``None``.
        """
        if line == "":
            return self._dispatch()

        if line.startswith(":"):
            self.stats['heartbeats'] += 1
            return None

        name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        self._process_field(name, value)
        return None

    def feed(self, lines: list[str]) -> list[ServerSentEvent]:
        """Feed several lines and collect every dispatched event."""
        events = []
        for line in lines:
            event = self.feed_line(line)
            if event is not None:
                events.append(event)
        return events

    def flush(self) -> bool:
        """
        Drop a block left open at end of stream.

        Returns True when a partially read block was discarded.
        """
        if self._pending.is_empty:
            return False
        self._pending.reset()
        self.stats['discarded_blocks'] += 1
        return True

    def _process_field(self, name: str, value: str) -> None:
        pending = self._pending
        if name == "event":
            pending.event = value
        elif name == "data":
            if pending.data_lines is None:
                pending.data_lines = []
            pending.data_lines.append(value)
        elif name == "id":
            if "\0" in value:
                return
            pending.id = value
        elif name == "retry":
            if not (value.isascii() and value.isdigit()):
                return
            pending.retry = int(value)
        else:
            # Unknown fields are ignored
            return
        pending.has_fields = True

    def _dispatch(self) -> ServerSentEvent | None:
        pending = self._pending
        if pending.is_empty:
            return None

        if pending.id is not None:
            self.last_event_id = pending.id
        if pending.retry is not None:
            self.reconnection_time = pending.retry

        if pending.data_lines is None:
            if pending.event is None:
                # id/retry-only block: connection control, nothing to deliver
                pending.reset()
                return None
            self.stats['parse_errors'] += 1
            event = ServerSentEvent(
                event=pending.event or DEFAULT_EVENT,
                data="",
                id=self.last_event_id,
                retry=pending.retry,
                has_data=False,
            )
        else:
            event = ServerSentEvent(
                event=pending.event or DEFAULT_EVENT,
                data="\n".join(pending.data_lines),
                id=self.last_event_id,
                retry=pending.retry,
            )

        pending.reset()
        self.stats['total_events'] += 1
        return event

    def get_stats(self) -> ParserStats:
        """Get parser statistics for monitoring."""
        return ParserStats(**self.stats)

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self.stats = {
            'total_events': 0,
            'heartbeats': 0,
            'parse_errors': 0,
            'discarded_blocks': 0,
        }
