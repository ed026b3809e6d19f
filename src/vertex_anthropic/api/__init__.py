"""Raw HTTPS access to Claude on Vertex AI."""

from .client import VERTEXAI_ANTHROPIC_ENDPOINT, VERTEXAI_BASE_URL, VertexAnthropicApi
from .credentials import CLOUD_PLATFORM_SCOPE, default_credentials, get_bearer_token

__all__ = [
    "CLOUD_PLATFORM_SCOPE",
    "VERTEXAI_ANTHROPIC_ENDPOINT",
    "VERTEXAI_BASE_URL",
    "VertexAnthropicApi",
    "default_credentials",
    "get_bearer_token",
]
