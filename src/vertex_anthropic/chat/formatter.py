"""Conversion between chat messages and the Messages API wire format."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from vertex_anthropic.exceptions import ConfigurationError
from vertex_anthropic.models.api import (
    AnthropicMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ContentBlock,
    ContentBlockType,
    ImageSource,
    Usage,
)
from vertex_anthropic.tools.models import FunctionTool

from .messages import (
    ChatResponse,
    ChatResponseMetadata,
    Generation,
    Message,
    Prompt,
    Role,
    ToolCall,
)
from .options import VertexAnthropicChatOptions

logger = logging.getLogger(__name__)


def ensure_alternating_roles(messages: list[AnthropicMessage]) -> list[AnthropicMessage]:
    """Merge consecutive same-role messages by concatenating their content blocks.

    The Messages API requires ``user`` and ``assistant`` turns to alternate.
    Several tool results answering one assistant turn therefore end up in a
    single ``user`` message.
    """
    merged: list[AnthropicMessage] = []
    for message in messages:
        if merged and merged[-1].role == message.role:
            merged[-1] = AnthropicMessage(
                role=message.role,
                content=[*merged[-1].content, *message.content],
            )
        else:
            merged.append(message)
    return merged


class AnthropicFormatter:
    """Builds :class:`ChatCompletionRequest` bodies and reads responses back.

    Only one system message is allowed per prompt; it is sent in the
    request's top-level ``system`` field.
    """

    def format(
        self,
        prompt: Prompt,
        options: VertexAnthropicChatOptions,
        tools: Sequence[FunctionTool] = (),
        *,
        stream: bool = False,
    ) -> ChatCompletionRequest:
        system_messages = [m for m in prompt.messages if m.role == Role.SYSTEM]
        if len(system_messages) > 1:
            msg = f"Only one system message is supported, got {len(system_messages)}"
            raise ConfigurationError(msg)
        if options.max_tokens is None:
            msg = "max_tokens must be set"
            raise ConfigurationError(msg)

        turns = [self.to_anthropic_message(m) for m in prompt.messages if m.role != Role.SYSTEM]
        # The Messages API rejects turns without content blocks.
        non_empty = [turn for turn in turns if turn.content]
        if len(non_empty) < len(turns):
            logger.debug("Skipping %d message(s) without content", len(turns) - len(non_empty))
        messages = ensure_alternating_roles(non_empty)
        if not messages:
            msg = "Prompt contains no user or assistant messages"
            raise ConfigurationError(msg)

        kwargs: dict[str, str] = {}
        if options.anthropic_version is not None:
            kwargs["anthropic_version"] = options.anthropic_version
        return ChatCompletionRequest(
            messages=messages,
            max_tokens=options.max_tokens,
            system=system_messages[0].content if system_messages else None,
            stream=stream,
            temperature=options.temperature,
            top_p=options.top_p,
            top_k=options.top_k,
            stop_sequences=options.stop_sequences,
            tools=[t.to_tool() for t in tools] or None,
            **kwargs,
        )

    @staticmethod
    def to_anthropic_message(message: Message) -> AnthropicMessage:
        if message.role == Role.USER:
            blocks = [
                ContentBlock(
                    type=ContentBlockType.IMAGE,
                    source=ImageSource(media_type=media.mime_type, data=media.base64_data),
                )
                for media in message.media
            ]
            if message.content:
                blocks.append(ContentBlock.from_text(message.content))
            return AnthropicMessage(role="user", content=blocks)

        if message.role == Role.ASSISTANT:
            blocks = [ContentBlock.from_text(message.content)] if message.content else []
            blocks.extend(
                ContentBlock.tool_use(call.id, call.name, call.arguments)
                for call in message.tool_calls
            )
            return AnthropicMessage(role="assistant", content=blocks)

        if message.role == Role.TOOL:
            result = ContentBlock.tool_result(
                message.tool_call_id or "",
                message.content,
                is_error=message.is_error or None,
            )
            return AnthropicMessage(role="user", content=[result])

        msg = f"Cannot convert {message.role} message to a conversation turn"
        raise ConfigurationError(msg)

    @staticmethod
    def metadata(response: ChatCompletionResponse) -> ChatResponseMetadata:
        return ChatResponseMetadata(
            id=response.id,
            model=response.model,
            usage=response.usage or Usage(),
            stop_reason=response.stop_reason,
        )

    def parse(self, response: ChatCompletionResponse) -> ChatResponse:
        """Convert a full response, or one stream chunk, into a :class:`ChatResponse`."""
        tool_calls = [
            ToolCall(id=block.id or "", name=block.name or "", arguments=block.input or {})
            for block in response.tool_use_blocks
        ]
        message = Message.assistant(response.text, tool_calls)
        return ChatResponse(
            generations=[Generation(message=message, finish_reason=response.stop_reason)],
            metadata=self.metadata(response),
        )


__all__ = ["AnthropicFormatter", "ensure_alternating_roles"]
