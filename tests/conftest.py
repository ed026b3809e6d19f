"""Shared fixtures and fakes for vertex-anthropic tests."""

from __future__ import annotations

import json
import os
from collections.abc import AsyncIterator, Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest

from vertex_anthropic.models.api import ChatCompletionRequest, ChatCompletionResponse, ContentBlock
from vertex_anthropic.settings import get_settings
from vertex_anthropic.streaming.pipeline import astream_chat_completions, stream_chat_completions

MODEL_ID = "claude-3-5-sonnet@20240620"

# ---------------------------------------------------------------------------
# Stream event payload builders
# ---------------------------------------------------------------------------


def message_start(msg_id: str = "msg_1", input_tokens: int | None = 10) -> dict[str, Any]:
    usage = {"input_tokens": input_tokens, "output_tokens": 1} if input_tokens is not None else None
    return {
        "type": "message_start",
        "message": {
            "id": msg_id,
            "type": "message",
            "role": "assistant",
            "model": MODEL_ID,
            "content": [],
            "stop_reason": None,
            "stop_sequence": None,
            "usage": usage,
        },
    }


def text_start(index: int = 0, text: str = "") -> dict[str, Any]:
    return {"type": "content_block_start", "index": index, "content_block": {"type": "text", "text": text}}


def text_delta(index: int, text: str) -> dict[str, Any]:
    return {"type": "content_block_delta", "index": index, "delta": {"type": "text_delta", "text": text}}


def tool_start(index: int, tool_id: str, name: str) -> dict[str, Any]:
    return {
        "type": "content_block_start",
        "index": index,
        "content_block": {"type": "tool_use", "id": tool_id, "name": name, "input": {}},
    }


def json_delta(index: int, fragment: str) -> dict[str, Any]:
    return {
        "type": "content_block_delta",
        "index": index,
        "delta": {"type": "input_json_delta", "partial_json": fragment},
    }


def block_stop(index: int) -> dict[str, Any]:
    return {"type": "content_block_stop", "index": index}


def message_delta(
    stop_reason: str | None = "end_turn",
    output_tokens: int | None = 12,
    **usage: int | None,
) -> dict[str, Any]:
    return {
        "type": "message_delta",
        "delta": {"stop_reason": stop_reason, "stop_sequence": None},
        "usage": {"output_tokens": output_tokens, **usage},
    }


def message_stop() -> dict[str, Any]:
    return {"type": "message_stop"}


def ping() -> dict[str, Any]:
    return {"type": "ping"}


def hello_world_events() -> list[dict[str, Any]]:
    """A text-only stream answering "Hello world"."""
    return [
        message_start(),
        text_start(0),
        text_delta(0, "Hello"),
        text_delta(0, " world"),
        block_stop(0),
        message_delta("end_turn"),
        message_stop(),
    ]


def tool_use_events(
    tool_id: str = "t1",
    name: str = "Weather",
    fragments: Sequence[str] = ('{"loc":', '"SF"}'),
    msg_id: str = "msg_1",
) -> list[dict[str, Any]]:
    """A stream with a short text block followed by one tool-use block."""
    return [
        message_start(msg_id),
        text_start(0),
        text_delta(0, "Checking."),
        block_stop(0),
        tool_start(1, tool_id, name),
        *(json_delta(1, fragment) for fragment in fragments),
        block_stop(1),
        message_delta("tool_use"),
        message_stop(),
    ]


def as_sse(events: Iterable[dict[str, Any]]) -> list[str]:
    """Encode payloads as the ``data`` strings of SSE frames."""
    return [json.dumps(event) for event in events]


def sse_body(events: Iterable[dict[str, Any]], *, done: bool = False) -> bytes:
    """Render a complete ``text/event-stream`` response body."""
    frames = [f"event: {event['type']}\ndata: {json.dumps(event)}\n\n" for event in events]
    if done:
        frames.append("data: [DONE]\n\n")
    return "".join(frames).encode()


async def aiter_items(items: Iterable[Any]) -> AsyncIterator[Any]:
    for item in items:
        yield item


# ---------------------------------------------------------------------------
# Callbacks
# ---------------------------------------------------------------------------


class RecordingCallback:
    """Records every stream callback invocation."""

    def __init__(self) -> None:
        self.tool_uses: list[ContentBlock] = []
        self.malformed: list[tuple[str, str, str]] = []
        self.completed: list[ChatCompletionResponse] = []

    def on_tool_use(self, block: ContentBlock) -> None:
        self.tool_uses.append(block)

    def on_malformed_tool_input(self, tool_id: str, name: str, raw_json: str) -> None:
        self.malformed.append((tool_id, name, raw_json))

    def on_stream_complete(self, response: ChatCompletionResponse) -> None:
        self.completed.append(response)


# ---------------------------------------------------------------------------
# Fake backend
# ---------------------------------------------------------------------------


def text_response(text: str, msg_id: str = "msg_1", **kwargs: Any) -> ChatCompletionResponse:
    payload: dict[str, Any] = {
        "id": msg_id,
        "type": "message",
        "role": "assistant",
        "model": MODEL_ID,
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "usage": {"input_tokens": 10, "output_tokens": 5},
    }
    payload.update(kwargs)
    return ChatCompletionResponse.model_validate(payload)


def tool_response(
    tool_id: str,
    name: str,
    tool_input: dict[str, Any],
    msg_id: str = "msg_tool",
) -> ChatCompletionResponse:
    return ChatCompletionResponse.model_validate({
        "id": msg_id,
        "type": "message",
        "role": "assistant",
        "model": MODEL_ID,
        "content": [{"type": "tool_use", "id": tool_id, "name": name, "input": tool_input}],
        "stop_reason": "tool_use",
        "usage": {"input_tokens": 20, "output_tokens": 8},
    })


class FakeBackend:
    """Scripted :class:`ChatBackend`.

    ``responses`` are returned by ``complete``/``acomplete`` in order;
    ``streams`` are event payload lists reduced for ``stream``/``astream``.
    """

    def __init__(
        self,
        responses: Sequence[ChatCompletionResponse] = (),
        streams: Sequence[list[dict[str, Any]]] = (),
    ) -> None:
        self._responses = list(responses)
        self._streams = list(streams)
        self.requests: list[tuple[ChatCompletionRequest, str]] = []

    def complete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        self.requests.append((request, model))
        return self._responses.pop(0)

    def stream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Any = None,
    ) -> Iterator[ChatCompletionResponse]:
        self.requests.append((request, model))
        return stream_chat_completions(as_sse(self._streams.pop(0)), callbacks)

    async def acomplete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        return self.complete(request, model)

    def astream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Any = None,
    ) -> AsyncIterator[ChatCompletionResponse]:
        self.requests.append((request, model))
        return astream_chat_completions(aiter_items(as_sse(self._streams.pop(0))), callbacks)


# ---------------------------------------------------------------------------
# Fake anthropic SDK clients
# ---------------------------------------------------------------------------


class FakeSdkModel:
    """Mimics an SDK pydantic model exposing ``model_dump``."""

    def __init__(self, data: dict[str, Any]) -> None:
        self._data = data

    def model_dump(self, mode: str = "python") -> dict[str, Any]:
        return json.loads(json.dumps(self._data))


class FakeSdkStream:
    def __init__(self, events: list[dict[str, Any]]) -> None:
        self._events = [FakeSdkModel(e) for e in events]
        self.closed = False

    def __iter__(self) -> Iterator[FakeSdkModel]:
        return iter(self._events)

    def close(self) -> None:
        self.closed = True


class FakeAsyncSdkStream:
    def __init__(self, events: list[dict[str, Any]]) -> None:
        self._events = [FakeSdkModel(e) for e in events]
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[FakeSdkModel]:
        for event in self._events:
            yield event

    async def close(self) -> None:
        self.closed = True


class FakeSdkMessages:
    def __init__(self, message: dict[str, Any] | None, events: list[dict[str, Any]] | None) -> None:
        self._message = message
        self._events = events
        self.calls: list[dict[str, Any]] = []
        self.last_stream: FakeSdkStream | None = None

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if kwargs.get("stream"):
            self.last_stream = FakeSdkStream(self._events or [])
            return self.last_stream
        return FakeSdkModel(self._message or {})


class FakeAsyncSdkMessages(FakeSdkMessages):
    async def create(self, **kwargs: Any) -> Any:  # type: ignore[override]
        self.calls.append(kwargs)
        if kwargs.get("stream"):
            return FakeAsyncSdkStream(self._events or [])
        return FakeSdkModel(self._message or {})


class FakeSdkClient:
    def __init__(
        self,
        message: dict[str, Any] | None = None,
        events: list[dict[str, Any]] | None = None,
    ) -> None:
        self.messages = FakeSdkMessages(message, events)


class FakeAsyncSdkClient:
    def __init__(
        self,
        message: dict[str, Any] | None = None,
        events: list[dict[str, Any]] | None = None,
    ) -> None:
        self.messages = FakeAsyncSdkMessages(message, events)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def recorder() -> RecordingCallback:
    """Return a fresh RecordingCallback."""
    return RecordingCallback()


@pytest.fixture
def hello_payloads() -> list[str]:
    """Return the "Hello world" stream as SSE data strings."""
    return as_sse(hello_world_events())


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep ambient VERTEX_AI_ANTHROPIC_* variables and .env files out of tests."""
    for key in list(os.environ):
        if key.startswith("VERTEX_AI_ANTHROPIC_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
