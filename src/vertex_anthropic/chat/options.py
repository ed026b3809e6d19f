"""Per-request generation options for the Vertex AI Anthropic chat model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from vertex_anthropic.models.api import DEFAULT_ANTHROPIC_VERSION
from vertex_anthropic.models.chat_models import DEFAULT_CHAT_MODEL
from vertex_anthropic.settings import VertexAnthropicSettings

DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.8
DEFAULT_TOP_K = 10


class VertexAnthropicChatOptions(BaseModel):
    """Generation options; ``None`` means "not set, use the default".

    ``tools`` names the registered tools enabled for a request.  ``None``
    enables every registered tool; an empty list disables tool use.
    """

    model_config = ConfigDict(frozen=True)

    model: str | None = None
    max_tokens: int | None = Field(default=None, gt=0)
    temperature: float | None = Field(default=None, ge=0.0, le=1.0)
    top_k: int | None = Field(default=None, gt=0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    stop_sequences: list[str] | None = None
    anthropic_version: str | None = None
    tools: list[str] | None = None

    @classmethod
    def defaults(cls) -> VertexAnthropicChatOptions:
        return cls(
            model=DEFAULT_CHAT_MODEL.value,
            max_tokens=DEFAULT_MAX_TOKENS,
            temperature=DEFAULT_TEMPERATURE,
            top_k=DEFAULT_TOP_K,
            anthropic_version=DEFAULT_ANTHROPIC_VERSION,
        )

    @classmethod
    def from_settings(cls, settings: VertexAnthropicSettings) -> VertexAnthropicChatOptions:
        return cls(
            model=settings.model,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            top_k=settings.top_k,
            anthropic_version=settings.anthropic_version,
        )

    def merged_with(self, defaults: VertexAnthropicChatOptions | None) -> VertexAnthropicChatOptions:
        """Return options where every field set here overrides ``defaults``."""
        if defaults is None:
            return self
        overrides = self.model_dump(exclude_none=True)
        return defaults.model_copy(update=overrides)


__all__ = [
    "DEFAULT_MAX_TOKENS",
    "DEFAULT_TEMPERATURE",
    "DEFAULT_TOP_K",
    "VertexAnthropicChatOptions",
]
