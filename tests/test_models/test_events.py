"""Tests for vertex_anthropic.models.events -- parsing and tool-use aggregation."""

from __future__ import annotations

import json
from typing import get_type_hints

import pytest

from tests.conftest import block_stop, json_delta, message_delta, message_start, text_delta, tool_start
from vertex_anthropic.exceptions import StreamProtocolError, UnsupportedEventError
from vertex_anthropic.models.api import ContentBlockType
from vertex_anthropic.models.events import (
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    InputJsonDelta,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    TextDelta,
    ToolUseAggregationEvent,
    UnknownEvent,
    WireEvent,
    is_filterable,
    parse_event,
)

# ---------------------------------------------------------------------------
# parse_event
# ---------------------------------------------------------------------------


class TestParseEvent:
    """Decoding of SSE payloads into typed events."""

    def test_message_start_from_json_text(self) -> None:
        event = parse_event(json.dumps(message_start("msg_42")))
        assert isinstance(event, MessageStartEvent)
        assert event.message.id == "msg_42"
        assert event.message.role == "assistant"
        assert event.message.usage is not None
        assert event.message.usage.input_tokens == 10

    def test_accepts_bytes(self) -> None:
        event = parse_event(json.dumps(block_stop(3)).encode())
        assert isinstance(event, ContentBlockStopEvent)
        assert event.index == 3

    def test_accepts_mapping(self) -> None:
        event = parse_event({"type": "message_stop"})
        assert isinstance(event, MessageStopEvent)

    def test_text_delta(self) -> None:
        event = parse_event(text_delta(0, "Hi"))
        assert isinstance(event, ContentBlockDeltaEvent)
        assert isinstance(event.delta, TextDelta)
        assert event.delta.text == "Hi"

    def test_input_json_delta(self) -> None:
        event = parse_event(json_delta(1, '{"a":'))
        assert isinstance(event, ContentBlockDeltaEvent)
        assert isinstance(event.delta, InputJsonDelta)
        assert event.delta.partial_json == '{"a":'

    def test_tool_use_block_start(self) -> None:
        event = parse_event(tool_start(1, "t1", "Weather"))
        assert isinstance(event, ContentBlockStartEvent)
        assert event.content_block.type == ContentBlockType.TOOL_USE
        assert event.content_block.id == "t1"
        assert event.content_block.name == "Weather"

    def test_message_delta_with_usage(self) -> None:
        event = parse_event(message_delta("max_tokens", output_tokens=7))
        assert isinstance(event, MessageDeltaEvent)
        assert event.delta.stop_reason == "max_tokens"
        assert event.usage is not None
        assert event.usage.output_tokens == 7

    def test_ping(self) -> None:
        assert isinstance(parse_event('{"type": "ping"}'), PingEvent)

    def test_error_event(self) -> None:
        event = parse_event({"type": "error", "error": {"type": "overloaded_error", "message": "busy"}})
        assert isinstance(event, ErrorEvent)
        assert event.error.type == "overloaded_error"
        assert event.error.message == "busy"

    def test_unknown_event_type_is_preserved(self) -> None:
        event = parse_event({"type": "thinking_heartbeat", "foo": 1})
        assert isinstance(event, UnknownEvent)
        assert event.type == "thinking_heartbeat"
        assert event.raw["foo"] == 1

    def test_extra_fields_are_ignored(self) -> None:
        payload = block_stop(0) | {"extra": "field"}
        assert isinstance(parse_event(payload), ContentBlockStopEvent)

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(StreamProtocolError, match="not valid JSON"):
            parse_event("{not json")

    def test_invalid_utf8_bytes_raise(self) -> None:
        with pytest.raises(StreamProtocolError, match="not valid JSON"):
            parse_event(b'{"type": "ping", "x": "\xff\xfe"}')

    def test_return_type_is_the_event_union(self) -> None:
        assert get_type_hints(parse_event)["return"] == WireEvent | UnknownEvent

    def test_missing_type_raises(self) -> None:
        with pytest.raises(StreamProtocolError, match="no event type"):
            parse_event('{"index": 0}')

    def test_non_object_payload_raises(self) -> None:
        with pytest.raises(StreamProtocolError):
            parse_event("[1, 2]")

    def test_unknown_delta_type_is_unsupported(self) -> None:
        payload = {"type": "content_block_delta", "index": 0, "delta": {"type": "citation_delta"}}
        with pytest.raises(UnsupportedEventError):
            parse_event(payload)

    def test_unknown_content_block_type_is_unsupported(self) -> None:
        payload = {"type": "content_block_start", "index": 0, "content_block": {"type": "audio"}}
        with pytest.raises(UnsupportedEventError):
            parse_event(payload)

    def test_unsupported_is_a_protocol_error(self) -> None:
        assert issubclass(UnsupportedEventError, StreamProtocolError)


class TestIsFilterable:
    """Only ping and unknown events are dropped before reduction."""

    def test_ping_is_filterable(self) -> None:
        assert is_filterable(PingEvent())

    def test_unknown_is_filterable(self) -> None:
        assert is_filterable(UnknownEvent(type="whatever"))

    def test_business_events_are_not_filterable(self) -> None:
        assert not is_filterable(parse_event(block_stop(0)))
        assert not is_filterable(MessageStopEvent())
        assert not is_filterable(parse_event({"type": "error", "error": {"type": "x", "message": "y"}}))


# ---------------------------------------------------------------------------
# ToolUseAggregationEvent
# ---------------------------------------------------------------------------


class TestToolUseAggregationEvent:
    """Fragment buffering and single parse on finalize."""

    def test_fresh_aggregate_is_empty(self) -> None:
        aggregate = ToolUseAggregationEvent()
        assert aggregate.is_empty()
        assert aggregate.open_invocation is None
        assert aggregate.type == "tool_use_aggregate"
        assert aggregate.tool_content_blocks == []

    def test_fragments_are_concatenated_verbatim(self) -> None:
        aggregate = ToolUseAggregationEvent().start(1, "t1", "Weather")
        aggregate.append_partial_json(1, '{"loc":')
        aggregate.append_partial_json(1, ' "SF"}')
        invocation, well_formed = aggregate.finalize()
        assert well_formed
        assert invocation.partial_json == '{"loc": "SF"}'
        assert invocation.input == {"loc": "SF"}

    def test_empty_buffer_means_no_arguments(self) -> None:
        aggregate = ToolUseAggregationEvent().start(0, "t1", "Clock")
        invocation, well_formed = aggregate.finalize()
        assert well_formed
        assert invocation.input == {}

    def test_malformed_json_yields_empty_input(self) -> None:
        aggregate = ToolUseAggregationEvent().start(0, "t1", "Weather")
        aggregate.append_partial_json(0, '{"loc": ')
        invocation, well_formed = aggregate.finalize()
        assert not well_formed
        assert invocation.input == {}
        assert invocation.finalized

    def test_non_object_json_is_malformed(self) -> None:
        aggregate = ToolUseAggregationEvent().start(0, "t1", "Weather")
        aggregate.append_partial_json(0, "[1, 2]")
        _, well_formed = aggregate.finalize()
        assert not well_formed

    def test_delta_without_open_invocation_raises(self) -> None:
        with pytest.raises(StreamProtocolError, match="without an open tool-use block"):
            ToolUseAggregationEvent().append_partial_json(0, "{}")

    def test_delta_for_other_index_raises(self) -> None:
        aggregate = ToolUseAggregationEvent().start(1, "t1", "Weather")
        with pytest.raises(StreamProtocolError, match="block 1 is open"):
            aggregate.append_partial_json(2, "{}")

    def test_second_start_while_open_raises(self) -> None:
        aggregate = ToolUseAggregationEvent().start(1, "t1", "Weather")
        with pytest.raises(StreamProtocolError, match="still open"):
            aggregate.start(2, "t2", "Other")

    def test_finalize_without_open_invocation_raises(self) -> None:
        with pytest.raises(StreamProtocolError):
            ToolUseAggregationEvent().finalize()

    def test_tool_content_blocks_only_include_finalized(self) -> None:
        aggregate = ToolUseAggregationEvent().start(1, "t1", "Weather")
        assert aggregate.tool_content_blocks == []
        aggregate.append_partial_json(1, '{"loc": "SF"}')
        aggregate.finalize()
        [block] = aggregate.tool_content_blocks
        assert block.type == ContentBlockType.TOOL_USE
        assert block.id == "t1"
        assert block.name == "Weather"
        assert block.input == {"loc": "SF"}
        assert block.index == 1
