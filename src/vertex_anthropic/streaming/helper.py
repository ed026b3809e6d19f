"""Reduction of Messages API stream events into unified responses.

The server only sends top-level metadata on specific events: ``message_start``
carries id, model and role, ``message_delta`` carries the stop reason and
cumulative usage, ``message_stop`` marks the end.  A
:class:`ChatCompletionResponseBuilder` created per stream carries those values
across events so every emitted chunk is self-describing.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from vertex_anthropic._callbacks import fire_callbacks
from vertex_anthropic.exceptions import (
    StreamProtocolError,
    StreamServerError,
    UnsupportedEventError,
)
from vertex_anthropic.models.api import (
    ChatCompletionResponse,
    ContentBlock,
    ContentBlockType,
    Usage,
)
from vertex_anthropic.models.events import (
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    EventType,
    InputJsonDelta,
    MergedEvent,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    TextDelta,
    ToolUseAggregationEvent,
    WireEvent,
)
from vertex_anthropic.protocols.callbacks import StreamCallback

logger = logging.getLogger(__name__)


class ChatCompletionResponseBuilder:
    """Per-stream accumulator of response metadata and content.

    Never share one builder between streams.
    """

    __slots__ = (
        "_blocks",
        "_open_indices",
        "id",
        "model",
        "role",
        "started",
        "stop_reason",
        "stop_sequence",
        "usage",
    )

    def __init__(self) -> None:
        self.id: str | None = None
        self.model: str | None = None
        self.role: str | None = None
        self.stop_reason: str | None = None
        self.stop_sequence: str | None = None
        self.usage = Usage()
        self.started = False
        self._blocks: dict[int, ContentBlock] = {}
        self._open_indices: set[int] = set()

    def start(self, message: ChatCompletionResponse) -> None:
        self.id = message.id
        self.model = message.model
        self.role = message.role
        self.stop_reason = message.stop_reason
        self.stop_sequence = message.stop_sequence
        self.usage = Usage().merged_with(message.usage)
        self.started = True
        for position, block in enumerate(message.content):
            index = block.index if block.index is not None else position
            self._blocks[index] = block.model_copy(update={"index": index})

    def open_block(self, index: int) -> None:
        self._open_indices.add(index)

    def close_block(self, index: int) -> None:
        self._open_indices.discard(index)

    def is_open(self, index: int) -> bool:
        return index in self._open_indices

    def append_text(self, index: int, text: str) -> None:
        block = self._blocks.get(index)
        if block is None:
            self._blocks[index] = ContentBlock(type=ContentBlockType.TEXT, text=text, index=index)
        else:
            block.text = (block.text or "") + text

    def add_block(self, block: ContentBlock) -> None:
        index = block.index if block.index is not None else len(self._blocks)
        self._blocks[index] = block.model_copy(update={"index": index})

    def update(
        self,
        stop_reason: str | None,
        stop_sequence: str | None,
        usage: Usage | None,
    ) -> None:
        if stop_reason is not None:
            self.stop_reason = stop_reason
        if stop_sequence is not None:
            self.stop_sequence = stop_sequence
        self.usage = self.usage.merged_with(usage)

    def build(
        self,
        response_type: str | None,
        content: list[ContentBlock] | None = None,
    ) -> ChatCompletionResponse:
        """Return a response stamped with the carried metadata.

        ``content`` defaults to everything accumulated so far, ordered by
        block index.
        """
        if content is None:
            content = [self._blocks[i].model_copy() for i in sorted(self._blocks)]
        return ChatCompletionResponse(
            id=self.id,
            type=response_type,
            role=self.role,
            model=self.model,
            content=content,
            stop_reason=self.stop_reason,
            stop_sequence=self.stop_sequence,
            usage=self.usage.model_copy(),
        )


class StreamHelper:
    """Tool-use detection, window merging and response assembly.

    The helper itself holds no per-stream state; everything mutable lives in
    the aggregation event of a window and in the builder of a stream.
    """

    __slots__ = ("_callbacks",)

    def __init__(self, callbacks: Sequence[StreamCallback] | None = None) -> None:
        self._callbacks: list[StreamCallback] = list(callbacks or [])

    @staticmethod
    def is_tool_use_start(event: WireEvent) -> bool:
        return (
            isinstance(event, ContentBlockStartEvent)
            and event.content_block.type == ContentBlockType.TOOL_USE
        )

    @staticmethod
    def is_tool_use_finish(event: WireEvent) -> bool:
        return isinstance(event, ContentBlockStopEvent)

    def merge_tool_use_events(self, aggregate: MergedEvent, event: WireEvent) -> MergedEvent:
        """Fold one event into the window's aggregation event.

        Use as the reducer of ``functools.reduce`` seeded with a fresh
        :class:`ToolUseAggregationEvent`.  Outside a tool-use block the event
        is returned unchanged, so singleton windows pass through.
        """
        if not isinstance(aggregate, ToolUseAggregationEvent):
            msg = f"Cannot merge {event.type} event into a window without a tool-use block"
            raise StreamProtocolError(msg)

        if isinstance(event, ErrorEvent):
            raise StreamServerError(event.error.type, event.error.message)

        if self.is_tool_use_start(event):
            block = event.content_block
            if not block.id or not block.name:
                msg = f"Tool-use block {event.index} has no id or name"
                raise StreamProtocolError(msg)
            return aggregate.start(event.index, block.id, block.name)

        if isinstance(event, ContentBlockDeltaEvent) and isinstance(event.delta, InputJsonDelta):
            return aggregate.append_partial_json(event.index, event.delta.partial_json)

        open_invocation = aggregate.open_invocation
        if open_invocation is None:
            if not aggregate.is_empty():
                msg = f"Unexpected {event.type} event after a finalized tool-use block"
                raise StreamProtocolError(msg)
            return event

        if not self.is_tool_use_finish(event) or event.index != open_invocation.index:
            msg = f"Unexpected {event.type} event inside tool-use block {open_invocation.index}"
            raise StreamProtocolError(msg)

        invocation, well_formed = aggregate.finalize()
        if not well_formed:
            logger.warning(
                "Tool '%s' (%s) sent malformed JSON input; continuing with empty arguments",
                invocation.name,
                invocation.id,
            )
            fire_callbacks(
                self._callbacks,
                "on_malformed_tool_input",
                invocation.id,
                invocation.name,
                invocation.partial_json,
            )
        return aggregate

    def event_to_chat_completion_response(
        self,
        event: MergedEvent,
        builder: ChatCompletionResponseBuilder,
    ) -> ChatCompletionResponse:
        """Apply one merged event to ``builder`` and return the resulting chunk.

        Chunks with a ``None`` type carry metadata only and are not meant
        to be shown to callers.
        """
        if isinstance(event, MessageStartEvent):
            builder.start(event.message)
            return builder.build(None, [])

        if isinstance(event, ErrorEvent):
            raise StreamServerError(event.error.type, event.error.message)

        if not builder.started:
            msg = f"{event.type} event received before message_start"
            raise StreamProtocolError(msg)

        if isinstance(event, ContentBlockStartEvent):
            block = event.content_block
            if block.type != ContentBlockType.TEXT:
                msg = f"Unsupported content block type: {block.type}"
                raise UnsupportedEventError(msg)
            builder.open_block(event.index)
            builder.append_text(event.index, block.text or "")
            if not block.text:
                return builder.build(None, [])
            increment = ContentBlock(type=ContentBlockType.TEXT, text=block.text, index=event.index)
            return builder.build(EventType.CONTENT_BLOCK_START, [increment])

        if isinstance(event, ContentBlockDeltaEvent):
            if not isinstance(event.delta, TextDelta):
                msg = f"Unsupported content block delta type: {event.delta.type}"
                raise UnsupportedEventError(msg)
            if not builder.is_open(event.index):
                msg = f"content_block_delta for block {event.index} that was never started"
                raise StreamProtocolError(msg)
            builder.append_text(event.index, event.delta.text)
            increment = ContentBlock(
                type=ContentBlockType.TEXT_DELTA,
                text=event.delta.text,
                index=event.index,
            )
            return builder.build(EventType.CONTENT_BLOCK_DELTA, [increment])

        if isinstance(event, ContentBlockStopEvent):
            builder.close_block(event.index)
            return builder.build(None, [])

        if isinstance(event, ToolUseAggregationEvent):
            blocks = event.tool_content_blocks
            for block in blocks:
                builder.add_block(block)
                fire_callbacks(self._callbacks, "on_tool_use", block)
            return builder.build(EventType.TOOL_USE_AGGREGATE, blocks)

        if isinstance(event, MessageDeltaEvent):
            builder.update(event.delta.stop_reason, event.delta.stop_sequence, event.usage)
            return builder.build(None, [])

        if isinstance(event, MessageStopEvent):
            response = builder.build(EventType.MESSAGE_STOP)
            fire_callbacks(self._callbacks, "on_stream_complete", response)
            return response

        msg = f"Unsupported stream event: {getattr(event, 'type', event)!r}"
        raise UnsupportedEventError(msg)


__all__ = ["ChatCompletionResponseBuilder", "StreamHelper"]
