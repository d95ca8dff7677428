"""
Tests for the line-oriented SSE parser.
"""

from chatstream.client.streaming import DEFAULT_EVENT, SSEParser, ServerSentEvent


class TestSSEParserDispatch:
    """Blank lines dispatch the pending block."""

    def test_single_data_line(self):
        """A data line followed by a blank line yields one message event."""
        parser = SSEParser()
        assert parser.feed_line("data: Hi") is None
        event = parser.feed_line("")
        assert event == ServerSentEvent(data="Hi")
        assert event.is_message

    def test_one_leading_space_is_stripped(self):
        """Only the single space after the colon is removed."""
        parser = SSEParser()
        events = parser.feed(["data:   two spaces kept ", ""])
        assert events[0].data == "  two spaces kept "

    def test_no_space_after_colon(self):
        parser = SSEParser()
        events = parser.feed(["data:tight", ""])
        assert events[0].data == "tight"

    def test_multiple_data_lines_joined_with_newline(self):
        parser = SSEParser()
        events = parser.feed(["data: first", "data: second", ""])
        assert events[0].data == "first\nsecond"

    def test_blank_lines_without_fields_dispatch_nothing(self):
        parser = SSEParser()
        assert parser.feed(["", "", ""]) == []

    def test_field_without_colon_has_empty_value(self):
        """A bare 'data' line contributes an empty data line."""
        parser = SSEParser()
        events = parser.feed(["data", ""])
        assert events[0].data == ""
        assert events[0].has_data

    def test_events_arrive_in_order(self):
        parser = SSEParser()
        events = parser.feed(
            ["data: one", "", "data: two", "", "data: three", ""]
        )
        assert [e.data for e in events] == ["one", "two", "three"]


class TestSSEParserFields:
    """Event names, ids, retry values and unknown fields."""

    def test_named_event(self):
        parser = SSEParser()
        events = parser.feed(["event: status", "data: thinking", ""])
        assert events[0].event == "status"
        assert not events[0].is_message

    def test_empty_event_name_means_message(self):
        parser = SSEParser()
        events = parser.feed(["event:", "data: x", ""])
        assert events[0].event == DEFAULT_EVENT

    def test_named_event_without_data_is_flagged(self):
        """An event that names itself but carries no data is a parse error."""
        parser = SSEParser()
        events = parser.feed(["event: message", ""])
        assert len(events) == 1
        assert events[0].has_data is False
        assert parser.get_stats().parse_errors == 1

    def test_id_updates_last_event_id(self):
        parser = SSEParser()
        events = parser.feed(["id: 7", "data: a", "", "data: b", ""])
        assert events[0].id == "7"
        # The last event id persists across later events
        assert events[1].id == "7"
        assert parser.last_event_id == "7"

    def test_id_with_nul_is_ignored(self):
        parser = SSEParser()
        parser.feed(["id: bad\0id", "data: a", ""])
        assert parser.last_event_id is None

    def test_retry_accepts_digits_only(self):
        parser = SSEParser()
        parser.feed(["retry: 3000", ""])
        assert parser.reconnection_time == 3000
        parser.feed(["retry: soon", ""])
        assert parser.reconnection_time == 3000

    def test_control_only_block_dispatches_nothing(self):
        parser = SSEParser()
        assert parser.feed(["id: 1", "retry: 10", ""]) == []
        assert parser.last_event_id == "1"

    def test_unknown_fields_are_ignored(self):
        parser = SSEParser()
        assert parser.feed(["foo: bar", ""]) == []
        events = parser.feed(["foo: bar", "data: kept", ""])
        assert events[0].data == "kept"


class TestSSEParserHeartbeatsAndFlush:
    """Comment lines and end-of-stream handling."""

    def test_comments_are_heartbeats(self):
        parser = SSEParser()
        assert parser.feed([": keep-alive", ""]) == []
        assert parser.get_stats().heartbeats == 1

    def test_comment_inside_block_does_not_break_it(self):
        parser = SSEParser()
        events = parser.feed(["data: a", ": ping", "data: b", ""])
        assert events[0].data == "a\nb"

    def test_flush_discards_incomplete_block(self):
        parser = SSEParser()
        parser.feed_line("data: never terminated")
        assert parser.flush() is True
        assert parser.flush() is False
        assert parser.get_stats().discarded_blocks == 1
        # The discarded block does not leak into the next one
        events = parser.feed(["data: next", ""])
        assert events[0].data == "next"

    def test_reset_stats(self):
        parser = SSEParser()
        parser.feed(["data: a", "", ": hb", ""])
        assert parser.get_stats().total_events == 1
        parser.reset_stats()
        stats = parser.get_stats()
        assert stats.total_events == 0
        assert stats.heartbeats == 0
