"""Streaming event models for the Messages API server-sent-event protocol.

Every SSE ``data`` payload decodes to exactly one event variant, selected by
its ``type`` field.  ``ToolUseAggregationEvent`` is not sent by the server;
it is the accumulator produced when a whole tool-use block is merged.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Annotated, Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from vertex_anthropic.exceptions import StreamProtocolError, UnsupportedEventError

from .api import ChatCompletionResponse, ContentBlock, ContentBlockType, Usage


class EventType(StrEnum):
    """Values of the ``type`` field of a stream event."""

    MESSAGE_START = "message_start"
    CONTENT_BLOCK_START = "content_block_start"
    CONTENT_BLOCK_DELTA = "content_block_delta"
    CONTENT_BLOCK_STOP = "content_block_stop"
    MESSAGE_DELTA = "message_delta"
    MESSAGE_STOP = "message_stop"
    PING = "ping"
    ERROR = "error"
    TOOL_USE_AGGREGATE = "tool_use_aggregate"


class _Event(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class MessageStartEvent(_Event):
    type: Literal["message_start"] = "message_start"
    message: ChatCompletionResponse


class ContentBlockStartEvent(_Event):
    type: Literal["content_block_start"] = "content_block_start"
    index: int
    content_block: ContentBlock


class TextDelta(_Event):
    type: Literal["text_delta"] = "text_delta"
    text: str


class InputJsonDelta(_Event):
    type: Literal["input_json_delta"] = "input_json_delta"
    partial_json: str


ContentBlockDelta: TypeAlias = Annotated[TextDelta | InputJsonDelta, Field(discriminator="type")]


class ContentBlockDeltaEvent(_Event):
    type: Literal["content_block_delta"] = "content_block_delta"
    index: int
    delta: ContentBlockDelta


class ContentBlockStopEvent(_Event):
    type: Literal["content_block_stop"] = "content_block_stop"
    index: int


class MessageDelta(_Event):
    stop_reason: str | None = None
    stop_sequence: str | None = None


class MessageDeltaEvent(_Event):
    type: Literal["message_delta"] = "message_delta"
    delta: MessageDelta
    usage: Usage | None = None


class MessageStopEvent(_Event):
    type: Literal["message_stop"] = "message_stop"


class PingEvent(_Event):
    type: Literal["ping"] = "ping"


class ErrorDetail(_Event):
    type: str
    message: str


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    error: ErrorDetail


class UnknownEvent(_Event):
    """An event whose ``type`` this client does not know; carries no business payload."""

    type: str
    raw: dict[str, Any] = Field(default_factory=dict)


WireEvent: TypeAlias = (
    MessageStartEvent
    | ContentBlockStartEvent
    | ContentBlockDeltaEvent
    | ContentBlockStopEvent
    | MessageDeltaEvent
    | MessageStopEvent
    | PingEvent
    | ErrorEvent
)
StreamEvent: TypeAlias = Annotated[WireEvent, Field(discriminator="type")]

_stream_event_adapter: TypeAdapter[Any] = TypeAdapter(StreamEvent)

_KNOWN_WIRE_TYPES: frozenset[str] = frozenset(
    t.value for t in EventType if t is not EventType.TOOL_USE_AGGREGATE
)


def parse_event(payload: str | bytes | Mapping[str, Any]) -> WireEvent | UnknownEvent:
    """Decode one SSE payload (JSON text or an already decoded mapping) into an event.

    Unknown event types become :class:`UnknownEvent`.  A known event whose
    content block or delta type is not supported raises
    :class:`UnsupportedEventError`.
    """
    if isinstance(payload, (str, bytes)):
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            msg = f"Stream payload is not valid JSON: {payload[:200]!r}"
            raise StreamProtocolError(msg) from exc
    else:
        data = dict(payload)

    if not isinstance(data, dict) or "type" not in data:
        msg = f"Stream payload has no event type: {data!r}"
        raise StreamProtocolError(msg)

    event_type = data["type"]
    if event_type not in _KNOWN_WIRE_TYPES:
        return UnknownEvent(type=str(event_type), raw=data)

    try:
        return _stream_event_adapter.validate_python(data)
    except ValidationError as exc:
        msg = f"Unsupported {event_type} event: {exc.errors()[0]['msg']}"
        raise UnsupportedEventError(msg) from exc


def is_filterable(event: WireEvent | UnknownEvent) -> bool:
    """Return True for events that carry no business payload (ping, unknown types)."""
    return isinstance(event, (PingEvent, UnknownEvent))


@dataclass(slots=True)
class ToolInvocation:
    """One tool call being assembled from streamed JSON fragments."""

    index: int
    id: str
    name: str
    partial_json: str = ""
    input: dict[str, Any] | None = None

    @property
    def finalized(self) -> bool:
        return self.input is not None


@dataclass(slots=True)
class ToolUseAggregationEvent:
    """Accumulator folded over one tool-use window.

    A fresh instance is created per window.  Deltas only ever append to the
    open invocation's buffer; the buffer is parsed exactly once, when the
    invocation is finalized.
    """

    invocations: list[ToolInvocation] = field(default_factory=list)
    type: str = EventType.TOOL_USE_AGGREGATE.value

    @property
    def open_invocation(self) -> ToolInvocation | None:
        if self.invocations and not self.invocations[-1].finalized:
            return self.invocations[-1]
        return None

    def is_empty(self) -> bool:
        return not self.invocations

    def start(self, index: int, tool_id: str, name: str) -> ToolUseAggregationEvent:
        if self.open_invocation is not None:
            msg = (
                f"Tool-use block {index} started while block "
                f"{self.open_invocation.index} is still open"
            )
            raise StreamProtocolError(msg)
        self.invocations.append(ToolInvocation(index=index, id=tool_id, name=name))
        return self

    def append_partial_json(self, index: int, fragment: str) -> ToolUseAggregationEvent:
        current = self.open_invocation
        if current is None:
            msg = f"input_json_delta for block {index} without an open tool-use block"
            raise StreamProtocolError(msg)
        if current.index != index:
            msg = f"input_json_delta for block {index} while block {current.index} is open"
            raise StreamProtocolError(msg)
        current.partial_json += fragment
        return self

    def finalize(self) -> tuple[ToolInvocation, bool]:
        """Parse the open invocation's buffer.

        Returns the invocation and whether its buffer was valid JSON.  An
        empty buffer means no arguments; a malformed one leaves the input
        empty.
        """
        current = self.open_invocation
        if current is None:
            msg = "content_block_stop without an open tool-use block"
            raise StreamProtocolError(msg)
        if not current.partial_json:
            current.input = {}
            return current, True
        try:
            parsed = json.loads(current.partial_json)
        except json.JSONDecodeError:
            current.input = {}
            return current, False
        if not isinstance(parsed, dict):
            current.input = {}
            return current, False
        current.input = parsed
        return current, True

    @property
    def tool_content_blocks(self) -> list[ContentBlock]:
        return [
            ContentBlock(
                type=ContentBlockType.TOOL_USE,
                id=inv.id,
                name=inv.name,
                input=inv.input,
                index=inv.index,
            )
            for inv in self.invocations
            if inv.finalized
        ]


MergedEvent: TypeAlias = WireEvent | ToolUseAggregationEvent


__all__ = [
    "ContentBlockDelta",
    "ContentBlockDeltaEvent",
    "ContentBlockStartEvent",
    "ContentBlockStopEvent",
    "ErrorDetail",
    "ErrorEvent",
    "EventType",
    "InputJsonDelta",
    "MergedEvent",
    "MessageDelta",
    "MessageDeltaEvent",
    "MessageStartEvent",
    "MessageStopEvent",
    "PingEvent",
    "StreamEvent",
    "TextDelta",
    "ToolInvocation",
    "ToolUseAggregationEvent",
    "UnknownEvent",
    "WireEvent",
    "is_filterable",
    "parse_event",
]
