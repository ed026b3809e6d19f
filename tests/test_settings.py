"""Tests for vertex_anthropic.settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from vertex_anthropic.exceptions import ConfigurationError
from vertex_anthropic.settings import VertexAnthropicSettings, get_settings


class TestDefaults:
    def test_defaults(self) -> None:
        settings = VertexAnthropicSettings()
        assert settings.project_id is None
        assert settings.location == "us-east5"
        assert settings.model == "claude-3-5-sonnet@20240620"
        assert settings.anthropic_version == "vertex-2023-10-16"
        assert settings.backend == "http"
        assert settings.max_tokens == 500
        assert settings.temperature == 0.8
        assert settings.top_k == 10
        assert settings.timeout == 60.0
        assert settings.max_retries == 2


class TestEnvironment:
    def test_prefixed_env_vars_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VERTEX_AI_ANTHROPIC_PROJECT_ID", "my-project")
        monkeypatch.setenv("VERTEX_AI_ANTHROPIC_LOCATION", "europe-west1")
        monkeypatch.setenv("VERTEX_AI_ANTHROPIC_MAX_TOKENS", "1024")
        settings = VertexAnthropicSettings()
        assert settings.project_id == "my-project"
        assert settings.location == "europe-west1"
        assert settings.max_tokens == 1024

    def test_dotenv_file(self, tmp_path: Path) -> None:
        (tmp_path / ".env").write_text("VERTEX_AI_ANTHROPIC_BACKEND=sdk\n")
        assert VertexAnthropicSettings().backend == "sdk"

    def test_invalid_backend_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VERTEX_AI_ANTHROPIC_BACKEND", "grpc")
        with pytest.raises(ValidationError):
            VertexAnthropicSettings()

    def test_temperature_bounds(self) -> None:
        with pytest.raises(ValidationError):
            VertexAnthropicSettings(temperature=2.0)


class TestRequireProject:
    def test_returns_project(self) -> None:
        assert VertexAnthropicSettings(project_id="p").require_project() == "p"

    def test_missing_project(self) -> None:
        with pytest.raises(ConfigurationError, match="VERTEX_AI_ANTHROPIC_PROJECT_ID"):
            VertexAnthropicSettings().require_project()


class TestGetSettings:
    def test_is_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = get_settings()
        monkeypatch.setenv("VERTEX_AI_ANTHROPIC_PROJECT_ID", "later")
        assert get_settings() is first
        get_settings.cache_clear()
        assert get_settings().project_id == "later"
