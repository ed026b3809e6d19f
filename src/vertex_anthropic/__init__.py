"""vertex-anthropic: Anthropic Claude models on Google Vertex AI.

Chat:
    VertexAnthropicChatModel, VertexAnthropicChatOptions, Prompt, Message,
    ToolCall, Media, ChatResponse, Generation, AnthropicFormatter,
    HttpBackend, SdkBackend

Raw API:
    VertexAnthropicApi, ChatCompletionRequest, ChatCompletionResponse,
    AnthropicMessage, ContentBlock, Tool, Usage, ChatModels

Streaming:
    stream_chat_completions, astream_chat_completions, StreamHelper,
    ChatCompletionResponseBuilder, window_tool_use, parse_event

Tools:
    tool, FunctionTool

Observability & protocols:
    StreamCallback, ChatBackend, UsageTracker

Configuration:
    VertexAnthropicSettings, get_settings
"""

from importlib.metadata import PackageNotFoundError, version

from vertex_anthropic.api import VertexAnthropicApi
from vertex_anthropic.chat import (
    AnthropicFormatter,
    ChatResponse,
    Generation,
    HttpBackend,
    Media,
    Message,
    Prompt,
    SdkBackend,
    ToolCall,
    VertexAnthropicChatModel,
    VertexAnthropicChatOptions,
)
from vertex_anthropic.exceptions import (
    ConfigurationError,
    StreamProtocolError,
    StreamServerError,
    TransportError,
    UnsupportedEventError,
    VertexAnthropicError,
    VertexApiError,
)
from vertex_anthropic.models import (
    AnthropicMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatModels,
    ContentBlock,
    ContentBlockType,
    Tool,
    ToolUseAggregationEvent,
    Usage,
    parse_event,
)
from vertex_anthropic.observability import UsageTracker
from vertex_anthropic.protocols import ChatBackend, StreamCallback
from vertex_anthropic.settings import VertexAnthropicSettings, get_settings
from vertex_anthropic.streaming import (
    ChatCompletionResponseBuilder,
    StreamHelper,
    astream_chat_completions,
    stream_chat_completions,
    window_tool_use,
)
from vertex_anthropic.tools import FunctionTool, tool

try:
    __version__ = version("vertex-anthropic")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = [
    "AnthropicFormatter",
    "AnthropicMessage",
    "ChatBackend",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatCompletionResponseBuilder",
    "ChatModels",
    "ChatResponse",
    "ConfigurationError",
    "ContentBlock",
    "ContentBlockType",
    "FunctionTool",
    "Generation",
    "HttpBackend",
    "Media",
    "Message",
    "Prompt",
    "SdkBackend",
    "StreamCallback",
    "StreamHelper",
    "StreamProtocolError",
    "StreamServerError",
    "Tool",
    "ToolCall",
    "ToolUseAggregationEvent",
    "TransportError",
    "UnsupportedEventError",
    "Usage",
    "UsageTracker",
    "VertexAnthropicApi",
    "VertexAnthropicChatModel",
    "VertexAnthropicChatOptions",
    "VertexAnthropicError",
    "VertexAnthropicSettings",
    "VertexApiError",
    "__version__",
    "astream_chat_completions",
    "get_settings",
    "parse_event",
    "stream_chat_completions",
    "tool",
    "window_tool_use",
]
