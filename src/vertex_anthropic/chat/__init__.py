"""Chat abstraction over Claude on Vertex AI."""

from .backends import HttpBackend, SdkBackend, create_backend
from .formatter import AnthropicFormatter, ensure_alternating_roles
from .messages import (
    ChatResponse,
    ChatResponseMetadata,
    Generation,
    Media,
    Message,
    Prompt,
    Role,
    ToolCall,
)
from .model import VertexAnthropicChatModel
from .options import VertexAnthropicChatOptions

__all__ = [
    "AnthropicFormatter",
    "ChatResponse",
    "ChatResponseMetadata",
    "Generation",
    "HttpBackend",
    "Media",
    "Message",
    "Prompt",
    "Role",
    "SdkBackend",
    "ToolCall",
    "VertexAnthropicChatModel",
    "VertexAnthropicChatOptions",
    "create_backend",
    "ensure_alternating_roles",
]
