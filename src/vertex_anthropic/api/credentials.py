"""Google Cloud credential helpers for bearer-token authentication."""

from __future__ import annotations

from typing import Any

import google.auth
import google.auth.exceptions
import google.auth.transport.requests

from vertex_anthropic.exceptions import ConfigurationError

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def default_credentials() -> Any:
    """Resolve Application Default Credentials scoped for Vertex AI."""
    try:
        credentials, _project = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    except google.auth.exceptions.DefaultCredentialsError as exc:
        msg = "No Google Cloud credentials found; run `gcloud auth application-default login`"
        raise ConfigurationError(msg) from exc
    return credentials


def get_bearer_token(credentials: Any) -> str:
    """Return a valid access token, refreshing ``credentials`` when expired."""
    if credentials is None:
        msg = "credentials must not be None"
        raise ConfigurationError(msg)
    if not credentials.valid:
        try:
            credentials.refresh(google.auth.transport.requests.Request())
        except google.auth.exceptions.RefreshError as exc:
            msg = "Failed to refresh Google Cloud access token"
            raise ConfigurationError(msg) from exc
    return str(credentials.token)


__all__ = ["CLOUD_PLATFORM_SCOPE", "default_credentials", "get_bearer_token"]
