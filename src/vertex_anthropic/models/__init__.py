"""Data models for vertex-anthropic."""

from .api import (
    DEFAULT_ANTHROPIC_VERSION,
    AnthropicMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ContentBlock,
    ContentBlockType,
    ImageSource,
    Tool,
    Usage,
)
from .chat_models import DEFAULT_CHAT_MODEL, ChatModels
from .events import (
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    EventType,
    InputJsonDelta,
    MergedEvent,
    MessageDelta,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    StreamEvent,
    TextDelta,
    ToolInvocation,
    ToolUseAggregationEvent,
    UnknownEvent,
    WireEvent,
    is_filterable,
    parse_event,
)

__all__ = [
    "DEFAULT_ANTHROPIC_VERSION",
    "DEFAULT_CHAT_MODEL",
    "AnthropicMessage",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatModels",
    "ContentBlock",
    "ContentBlockDeltaEvent",
    "ContentBlockStartEvent",
    "ContentBlockStopEvent",
    "ContentBlockType",
    "ErrorEvent",
    "EventType",
    "ImageSource",
    "InputJsonDelta",
    "MergedEvent",
    "MessageDelta",
    "MessageDeltaEvent",
    "MessageStartEvent",
    "MessageStopEvent",
    "PingEvent",
    "StreamEvent",
    "TextDelta",
    "Tool",
    "ToolInvocation",
    "ToolUseAggregationEvent",
    "UnknownEvent",
    "Usage",
    "WireEvent",
    "is_filterable",
    "parse_event",
]
