"""Raw HTTPS client for Claude models on Vertex AI.

Uses the ``rawPredict`` endpoint for single responses and
``streamRawPredict`` for server-sent-event streams.  Stream payloads are
reduced by :mod:`vertex_anthropic.streaming`.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator, Sequence
from typing import Any

import httpx
from httpx_sse import SSEError, aconnect_sse, connect_sse

from vertex_anthropic.exceptions import ConfigurationError, TransportError, VertexApiError
from vertex_anthropic.models.api import ChatCompletionRequest, ChatCompletionResponse
from vertex_anthropic.protocols.callbacks import StreamCallback
from vertex_anthropic.settings import VertexAnthropicSettings, get_settings
from vertex_anthropic.streaming.pipeline import astream_chat_completions, stream_chat_completions

from .credentials import default_credentials, get_bearer_token

logger = logging.getLogger(__name__)

VERTEXAI_BASE_URL = "https://{location}-aiplatform.googleapis.com"
VERTEXAI_ANTHROPIC_ENDPOINT = (
    "/v1/projects/{project_id}/locations/{location}/publishers/anthropic/models/{model}"
)

_CONNECT_TIMEOUT = 10.0


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_error:
        raise VertexApiError(response.status_code, _error_body(response))


class VertexAnthropicApi:
    """Vertex AI Anthropic API client.

    Usage::

        api = VertexAnthropicApi("my-project", "us-east5")
        request = ChatCompletionRequest(
            messages=[AnthropicMessage(role="user", content=[ContentBlock.from_text("Hi")])],
            max_tokens=256,
            stream=True,
        )
        for chunk in api.chat_completion_stream(request, "claude-3-5-sonnet@20240620"):
            print(chunk.text, end="")

    Authentication uses ``access_token`` when given, otherwise ``credentials``
    (a ``google.auth`` credentials object), otherwise Application Default
    Credentials.
    """

    def __init__(
        self,
        project_id: str,
        location: str,
        *,
        credentials: Any = None,
        access_token: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not project_id:
            msg = "project_id must not be empty"
            raise ConfigurationError(msg)
        if not location:
            msg = "location must not be empty"
            raise ConfigurationError(msg)

        self.project_id = project_id
        self.location = location
        self._credentials = credentials
        self._access_token = access_token

        base_url = VERTEXAI_BASE_URL.format(location=location)
        client_timeout = httpx.Timeout(timeout, connect=_CONNECT_TIMEOUT)
        headers = {"Content-Type": "application/json"}
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=client_timeout,
            transport=transport or httpx.HTTPTransport(retries=max_retries),
        )
        self._async_client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=client_timeout,
            transport=async_transport or httpx.AsyncHTTPTransport(retries=max_retries),
        )

    @classmethod
    def from_settings(
        cls,
        settings: VertexAnthropicSettings | None = None,
        **kwargs: Any,
    ) -> VertexAnthropicApi:
        settings = settings or get_settings()
        return cls(
            settings.require_project(),
            settings.location,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            **kwargs,
        )

    def endpoint(self, model: str, method: str) -> str:
        path = VERTEXAI_ANTHROPIC_ENDPOINT.format(
            project_id=self.project_id,
            location=self.location,
            model=model,
        )
        return f"{path}:{method}"

    def get_bearer_token(self) -> str:
        if self._access_token:
            return self._access_token
        if self._credentials is None:
            self._credentials = default_credentials()
        return get_bearer_token(self._credentials)

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.get_bearer_token()}"}

    # -- Single response --

    def chat_completion(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        """Create a model response for the given conversation."""
        if request.stream:
            msg = "Request must set the stream property to false."
            raise ValueError(msg)
        try:
            response = self._client.post(
                self.endpoint(model, "rawPredict"),
                json=request.to_body(),
                headers=self._auth_headers(),
            )
        except httpx.TransportError as exc:
            msg = f"rawPredict request to {self.location} failed: {exc}"
            raise TransportError(msg) from exc
        _raise_for_status(response)
        return ChatCompletionResponse.model_validate(response.json())

    async def achat_completion(
        self,
        request: ChatCompletionRequest,
        model: str,
    ) -> ChatCompletionResponse:
        """Async variant of :meth:`chat_completion`."""
        if request.stream:
            msg = "Request must set the stream property to false."
            raise ValueError(msg)
        try:
            response = await self._async_client.post(
                self.endpoint(model, "rawPredict"),
                json=request.to_body(),
                headers=self._auth_headers(),
            )
        except httpx.TransportError as exc:
            msg = f"rawPredict request to {self.location} failed: {exc}"
            raise TransportError(msg) from exc
        _raise_for_status(response)
        return ChatCompletionResponse.model_validate(response.json())

    # -- Streaming --

    def chat_completion_stream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> Iterator[ChatCompletionResponse]:
        """Stream response chunks for the given conversation.

        The request must have ``stream=True``.  Chunks are produced lazily as
        events arrive; tool-use blocks arrive as a single chunk each.
        """
        if not request.stream:
            msg = "Request must set the stream property to true."
            raise ValueError(msg)
        payloads = self._iter_sse_data(self.endpoint(model, "streamRawPredict"), request.to_body())
        return stream_chat_completions(payloads, callbacks)

    def achat_completion_stream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> AsyncIterator[ChatCompletionResponse]:
        """Async variant of :meth:`chat_completion_stream`."""
        if not request.stream:
            msg = "Request must set the stream property to true."
            raise ValueError(msg)
        payloads = self._aiter_sse_data(self.endpoint(model, "streamRawPredict"), request.to_body())
        return astream_chat_completions(payloads, callbacks)

    def _iter_sse_data(self, url: str, body: dict[str, Any]) -> Iterator[str]:
        try:
            with connect_sse(
                self._client, "POST", url, json=body, headers=self._auth_headers(),
            ) as event_source:
                if event_source.response.is_error:
                    event_source.response.read()
                    _raise_for_status(event_source.response)
                for sse in event_source.iter_sse():
                    yield sse.data
        except (httpx.TransportError, SSEError) as exc:
            msg = f"streamRawPredict stream from {self.location} failed: {exc}"
            raise TransportError(msg) from exc

    async def _aiter_sse_data(self, url: str, body: dict[str, Any]) -> AsyncIterator[str]:
        try:
            async with aconnect_sse(
                self._async_client, "POST", url, json=body, headers=self._auth_headers(),
            ) as event_source:
                if event_source.response.is_error:
                    await event_source.response.aread()
                    _raise_for_status(event_source.response)
                async for sse in event_source.aiter_sse():
                    yield sse.data
        except (httpx.TransportError, SSEError) as exc:
            msg = f"streamRawPredict stream from {self.location} failed: {exc}"
            raise TransportError(msg) from exc

    # -- Lifecycle --

    def close(self) -> None:
        self._client.close()

    async def aclose(self) -> None:
        await self._async_client.aclose()

    def __enter__(self) -> VertexAnthropicApi:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


__all__ = ["VERTEXAI_ANTHROPIC_ENDPOINT", "VERTEXAI_BASE_URL", "VertexAnthropicApi"]
