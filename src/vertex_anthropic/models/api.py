"""Wire-level request and response models for the Anthropic Messages API on Vertex AI."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ANTHROPIC_VERSION = "vertex-2023-10-16"


class ContentBlockType(StrEnum):
    """Content block kinds exchanged with the Messages API."""

    TEXT = "text"
    TEXT_DELTA = "text_delta"
    TOOL_USE = "tool_use"
    INPUT_JSON_DELTA = "input_json_delta"
    TOOL_RESULT = "tool_result"
    IMAGE = "image"


class ImageSource(BaseModel):
    """Inline base64 image payload."""

    type: Literal["base64"] = "base64"
    media_type: str
    data: str


class ContentBlock(BaseModel):
    """A single unit of message content.

    Text blocks use ``text``; tool invocations use ``id``, ``name`` and
    ``input``; tool results use ``tool_use_id`` and ``content``.  Streamed
    increments also carry the ``index`` of the block they belong to.
    """

    model_config = ConfigDict(extra="ignore")

    type: ContentBlockType
    text: str | None = None
    index: int | None = None
    id: str | None = None
    name: str | None = None
    input: dict[str, Any] | None = None
    tool_use_id: str | None = None
    content: str | None = None
    is_error: bool | None = None
    source: ImageSource | None = None

    @classmethod
    def from_text(cls, text: str) -> ContentBlock:
        return cls(type=ContentBlockType.TEXT, text=text)

    @classmethod
    def tool_use(cls, tool_id: str, name: str, tool_input: dict[str, Any]) -> ContentBlock:
        return cls(type=ContentBlockType.TOOL_USE, id=tool_id, name=name, input=tool_input)

    @classmethod
    def tool_result(cls, tool_use_id: str, content: str, *, is_error: bool | None = None) -> ContentBlock:
        return cls(
            type=ContentBlockType.TOOL_RESULT,
            tool_use_id=tool_use_id,
            content=content,
            is_error=is_error,
        )


class Usage(BaseModel):
    """Token counters reported by the API.

    Streaming responses report counters in several events; ``merged_with``
    keeps the last non-null value seen for each counter.
    """

    input_tokens: int | None = None
    output_tokens: int | None = None
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None

    @property
    def total_tokens(self) -> int:
        return (self.input_tokens or 0) + (self.output_tokens or 0)

    def merged_with(self, other: Usage | None) -> Usage:
        if other is None:
            return self.model_copy()
        updates = {
            name: value
            for name, value in other.model_dump().items()
            if value is not None
        }
        return self.model_copy(update=updates)


class AnthropicMessage(BaseModel):
    """A single conversation turn in a request."""

    role: Literal["user", "assistant"]
    content: list[ContentBlock]


class Tool(BaseModel):
    """Tool definition advertised to the model."""

    name: str
    description: str
    input_schema: dict[str, Any]


class ChatCompletionRequest(BaseModel):
    """Body of a ``rawPredict`` / ``streamRawPredict`` call.

    The model id is not part of the body on Vertex AI; it is encoded in the
    endpoint URL instead, and ``anthropic_version`` is required.
    """

    messages: list[AnthropicMessage]
    max_tokens: int = Field(gt=0)
    anthropic_version: str = DEFAULT_ANTHROPIC_VERSION
    system: str | None = None
    stream: bool = False
    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    stop_sequences: list[str] | None = None
    tools: list[Tool] | None = None

    def to_body(self) -> dict[str, Any]:
        """Serialize for the raw HTTPS endpoint."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_sdk_params(self) -> dict[str, Any]:
        """Serialize as keyword arguments for ``messages.create`` of the SDK client."""
        return self.model_dump(
            mode="json",
            exclude_none=True,
            exclude={"anthropic_version", "stream"},
        )


class ChatCompletionResponse(BaseModel):
    """Unified response: a full message, or one increment of a stream.

    ``type`` is ``"message"`` for non-streaming responses.  For streamed
    chunks it names the event that produced the chunk; a ``None`` type marks
    a metadata-only chunk that is never shown to callers.
    """

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    type: str | None = None
    role: str | None = None
    model: str | None = None
    content: list[ContentBlock] = Field(default_factory=list)
    stop_reason: str | None = None
    stop_sequence: str | None = None
    usage: Usage | None = None

    @property
    def text(self) -> str:
        return "".join(
            block.text or ""
            for block in self.content
            if block.type in (ContentBlockType.TEXT, ContentBlockType.TEXT_DELTA)
        )

    @property
    def tool_use_blocks(self) -> list[ContentBlock]:
        return [block for block in self.content if block.type == ContentBlockType.TOOL_USE]


__all__ = [
    "DEFAULT_ANTHROPIC_VERSION",
    "AnthropicMessage",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ContentBlock",
    "ContentBlockType",
    "ImageSource",
    "Tool",
    "Usage",
]
