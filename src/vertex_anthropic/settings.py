"""Client settings using pydantic-settings.

Loads configuration from ``VERTEX_AI_ANTHROPIC_*`` environment variables with
``.env`` file support.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vertex_anthropic.exceptions import ConfigurationError
from vertex_anthropic.models.api import DEFAULT_ANTHROPIC_VERSION
from vertex_anthropic.models.chat_models import DEFAULT_CHAT_MODEL


class VertexAnthropicSettings(BaseSettings):
    """Connection and default generation settings."""

    model_config = SettingsConfigDict(
        env_prefix="VERTEX_AI_ANTHROPIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    project_id: str | None = Field(default=None, description="Google Cloud project id")
    location: str = Field(default="us-east5", description="Vertex AI region hosting Claude")
    model: str = Field(default=DEFAULT_CHAT_MODEL.value)
    anthropic_version: str = DEFAULT_ANTHROPIC_VERSION
    backend: Literal["http", "sdk"] = Field(
        default="http",
        description="'http' for the raw HTTPS API, 'sdk' for the anthropic SDK client",
    )

    max_tokens: int = Field(default=500, gt=0)
    temperature: float | None = Field(default=0.8, ge=0.0, le=1.0)
    top_k: int | None = Field(default=10, gt=0)

    timeout: float = Field(default=60.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(default=2, ge=0)

    def require_project(self) -> str:
        if not self.project_id:
            msg = (
                "No Google Cloud project configured; set VERTEX_AI_ANTHROPIC_PROJECT_ID "
                "or pass project_id explicitly"
            )
            raise ConfigurationError(msg)
        return self.project_id


@lru_cache
def get_settings() -> VertexAnthropicSettings:
    """Return the cached settings instance."""
    return VertexAnthropicSettings()


__all__ = ["VertexAnthropicSettings", "get_settings"]
