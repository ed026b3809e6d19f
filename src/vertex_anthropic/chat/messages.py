"""Provider-neutral chat messages, prompts and responses."""

from __future__ import annotations

import base64
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from vertex_anthropic.models.api import Usage

from .options import VertexAnthropicChatOptions


class Role(StrEnum):
    """The author of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class Media(BaseModel):
    """Inline binary content attached to a user message."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: bytes

    @property
    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


class ToolCall(BaseModel):
    """A tool invocation requested by the assistant."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class Message(BaseModel):
    """A single chat message.

    ``tool_calls`` is only meaningful on assistant messages; ``tool_call_id``
    is required on tool messages and names the call being answered.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    media: list[Media] = Field(default_factory=list)
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_call_id: str | None = None
    name: str | None = None
    is_error: bool = False

    @model_validator(mode="after")
    def _check_role_fields(self) -> Message:
        if self.role == Role.TOOL and not self.tool_call_id:
            msg = "Tool messages require a tool_call_id"
            raise ValueError(msg)
        if self.tool_calls and self.role != Role.ASSISTANT:
            msg = "Only assistant messages may carry tool_calls"
            raise ValueError(msg)
        return self

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str, media: list[Media] | None = None) -> Message:
        return cls(role=Role.USER, content=content, media=media or [])

    @classmethod
    def assistant(cls, content: str = "", tool_calls: list[ToolCall] | None = None) -> Message:
        return cls(role=Role.ASSISTANT, content=content, tool_calls=tool_calls or [])

    @classmethod
    def tool(
        cls,
        tool_call_id: str,
        content: str,
        *,
        name: str | None = None,
        is_error: bool = False,
    ) -> Message:
        return cls(
            role=Role.TOOL,
            content=content,
            tool_call_id=tool_call_id,
            name=name,
            is_error=is_error,
        )


class Prompt(BaseModel):
    """An ordered conversation plus optional per-request options."""

    model_config = ConfigDict(frozen=True)

    messages: list[Message]
    options: VertexAnthropicChatOptions | None = None

    @classmethod
    def of(cls, text: str, options: VertexAnthropicChatOptions | None = None) -> Prompt:
        return cls(messages=[Message.user(text)], options=options)

    def with_messages(self, messages: list[Message]) -> Prompt:
        return self.model_copy(update={"messages": messages})


class Generation(BaseModel):
    """One assistant output: the message plus why the model stopped."""

    model_config = ConfigDict(frozen=True)

    message: Message
    finish_reason: str | None = None

    @property
    def text(self) -> str:
        return self.message.content


class ChatResponseMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str | None = None
    model: str | None = None
    usage: Usage = Field(default_factory=Usage)
    stop_reason: str | None = None


class ChatResponse(BaseModel):
    """The result of a chat call, or one increment of a streamed call."""

    model_config = ConfigDict(frozen=True)

    generations: list[Generation] = Field(default_factory=list)
    metadata: ChatResponseMetadata = Field(default_factory=ChatResponseMetadata)

    @property
    def result(self) -> Generation | None:
        return self.generations[0] if self.generations else None

    @property
    def text(self) -> str:
        return "".join(g.text for g in self.generations)

    @property
    def tool_calls(self) -> list[ToolCall]:
        return [call for g in self.generations for call in g.message.tool_calls]

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


__all__ = [
    "ChatResponse",
    "ChatResponseMetadata",
    "Generation",
    "Media",
    "Message",
    "Prompt",
    "Role",
    "ToolCall",
]
