"""End-to-end reduction of an SSE payload stream into response chunks.

    payloads -> decode (stop at [DONE], drop ping) -> window -> merge -> assemble

Every stage is a generator, so the stream is consumed one event at a time.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator, Mapping, Sequence
from functools import reduce
from typing import Any

from vertex_anthropic.models.api import ChatCompletionResponse
from vertex_anthropic.models.events import (
    ToolUseAggregationEvent,
    WireEvent,
    is_filterable,
    parse_event,
)
from vertex_anthropic.protocols.callbacks import StreamCallback

from .helper import ChatCompletionResponseBuilder, StreamHelper
from .windowing import awindow_tool_use, window_tool_use

logger = logging.getLogger(__name__)

SSE_DONE = "[DONE]"

Payload = str | bytes | Mapping[str, Any]


def _decode(payload: Payload) -> WireEvent | None:
    if isinstance(payload, (str, bytes)) and not payload.strip():
        return None
    event = parse_event(payload)
    if is_filterable(event):
        logger.debug("Dropping %s stream event", event.type)
        return None
    return event


def _is_done(payload: Payload) -> bool:
    if isinstance(payload, bytes):
        return payload.strip() == SSE_DONE.encode()
    return isinstance(payload, str) and payload.strip() == SSE_DONE


def decode_events(payloads: Iterable[Payload]) -> Iterator[WireEvent]:
    """Parse SSE ``data`` payloads into events until the ``[DONE]`` sentinel."""
    for payload in payloads:
        if _is_done(payload):
            return
        event = _decode(payload)
        if event is not None:
            yield event


async def adecode_events(payloads: AsyncIterable[Payload]) -> AsyncIterator[WireEvent]:
    """Async variant of :func:`decode_events`."""
    async for payload in payloads:
        if _is_done(payload):
            return
        event = _decode(payload)
        if event is not None:
            yield event


def _reduce_window(
    window: list[WireEvent],
    helper: StreamHelper,
    builder: ChatCompletionResponseBuilder,
) -> ChatCompletionResponse | None:
    merged = reduce(helper.merge_tool_use_events, window, ToolUseAggregationEvent())
    response = helper.event_to_chat_completion_response(merged, builder)
    return response if response.type is not None else None


def reduce_events(
    events: Iterable[WireEvent],
    callbacks: Sequence[StreamCallback] | None = None,
) -> Iterator[ChatCompletionResponse]:
    """Reduce decoded events into caller-visible response chunks.

    Plain content increments are yielded one at a time, each tool-use block
    as exactly one chunk, and ``message_stop`` as a terminal chunk holding the
    full message.  If the input ends early no terminal chunk is produced.
    """
    helper = StreamHelper(callbacks)
    builder = ChatCompletionResponseBuilder()
    for window in window_tool_use(events):
        response = _reduce_window(window, helper, builder)
        if response is not None:
            yield response


async def areduce_events(
    events: AsyncIterable[WireEvent],
    callbacks: Sequence[StreamCallback] | None = None,
) -> AsyncIterator[ChatCompletionResponse]:
    """Async variant of :func:`reduce_events`."""
    helper = StreamHelper(callbacks)
    builder = ChatCompletionResponseBuilder()
    async for window in awindow_tool_use(events):
        response = _reduce_window(window, helper, builder)
        if response is not None:
            yield response


def stream_chat_completions(
    payloads: Iterable[Payload],
    callbacks: Sequence[StreamCallback] | None = None,
) -> Iterator[ChatCompletionResponse]:
    """Decode and reduce raw SSE payloads in one lazy pass."""
    return reduce_events(decode_events(payloads), callbacks)


def astream_chat_completions(
    payloads: AsyncIterable[Payload],
    callbacks: Sequence[StreamCallback] | None = None,
) -> AsyncIterator[ChatCompletionResponse]:
    """Async variant of :func:`stream_chat_completions`."""
    return areduce_events(adecode_events(payloads), callbacks)


__all__ = [
    "SSE_DONE",
    "adecode_events",
    "areduce_events",
    "astream_chat_completions",
    "decode_events",
    "reduce_events",
    "stream_chat_completions",
]
