"""Backends that deliver Messages API requests to Vertex AI.

``HttpBackend`` talks to the ``rawPredict`` endpoints directly;
``SdkBackend`` goes through the ``anthropic`` SDK's Vertex clients.  Both
reduce streams with the same pipeline, so callers see identical chunks.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from vertex_anthropic.api.client import VertexAnthropicApi
from vertex_anthropic.exceptions import TransportError, VertexApiError
from vertex_anthropic.models.api import ChatCompletionRequest, ChatCompletionResponse
from vertex_anthropic.protocols.backend import ChatBackend
from vertex_anthropic.protocols.callbacks import StreamCallback
from vertex_anthropic.settings import VertexAnthropicSettings, get_settings
from vertex_anthropic.streaming.pipeline import astream_chat_completions, stream_chat_completions

logger = logging.getLogger(__name__)


class HttpBackend:
    """Backend over :class:`VertexAnthropicApi`."""

    __slots__ = ("_api",)

    def __init__(self, api: VertexAnthropicApi) -> None:
        self._api = api

    @classmethod
    def from_settings(cls, settings: VertexAnthropicSettings | None = None) -> HttpBackend:
        return cls(VertexAnthropicApi.from_settings(settings))

    @property
    def api(self) -> VertexAnthropicApi:
        return self._api

    def complete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        return self._api.chat_completion(request.model_copy(update={"stream": False}), model)

    def stream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> Iterator[ChatCompletionResponse]:
        return self._api.chat_completion_stream(
            request.model_copy(update={"stream": True}), model, callbacks,
        )

    async def acomplete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        return await self._api.achat_completion(request.model_copy(update={"stream": False}), model)

    def astream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> AsyncIterator[ChatCompletionResponse]:
        return self._api.achat_completion_stream(
            request.model_copy(update={"stream": True}), model, callbacks,
        )


def _event_payload(event: Any) -> Mapping[str, Any]:
    if isinstance(event, Mapping):
        return event
    return event.model_dump(mode="json")


class SdkBackend:
    """Backend over ``anthropic.AnthropicVertex`` / ``AsyncAnthropicVertex``.

    Clients are created on first use unless injected.  Raw SDK stream events
    are reduced by the same pipeline as the HTTP backend.
    """

    __slots__ = (
        "_access_token",
        "_async_client",
        "_client",
        "_max_retries",
        "_project_id",
        "_region",
        "_timeout",
    )

    def __init__(
        self,
        project_id: str | None = None,
        region: str | None = None,
        *,
        client: Any = None,
        async_client: Any = None,
        access_token: str | None = None,
        timeout: float = 60.0,
        max_retries: int = 2,
    ) -> None:
        self._project_id = project_id
        self._region = region
        self._client: Any = client
        self._async_client: Any = async_client
        self._access_token = access_token
        self._timeout = timeout
        self._max_retries = max_retries

    @classmethod
    def from_settings(cls, settings: VertexAnthropicSettings | None = None, **kwargs: Any) -> SdkBackend:
        settings = settings or get_settings()
        return cls(
            settings.require_project(),
            settings.location,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            **kwargs,
        )

    @staticmethod
    def _import_anthropic() -> Any:
        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for the SDK backend. "
                "Install with: pip install vertex-anthropic[anthropic]"
            )
            raise ImportError(msg) from None
        return anthropic

    def _client_kwargs(self) -> dict[str, Any]:
        return {
            "project_id": self._project_id,
            "region": self._region,
            "access_token": self._access_token,
            "timeout": self._timeout,
            "max_retries": self._max_retries,
        }

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._import_anthropic().AnthropicVertex(**self._client_kwargs())
        return self._client

    @property
    def async_client(self) -> Any:
        if self._async_client is None:
            self._async_client = self._import_anthropic().AsyncAnthropicVertex(**self._client_kwargs())
        return self._async_client

    @staticmethod
    def _sdk_errors() -> tuple[tuple[type[Exception], ...], tuple[type[Exception], ...]]:
        """Return the SDK's (status, connection) error types.

        Both tuples are empty when ``anthropic`` is not installed, so nothing
        is translated for injected fake clients.
        """
        try:
            import anthropic as _anthropic
        except ImportError:
            return (), ()
        return (_anthropic.APIStatusError,), (_anthropic.APIConnectionError,)

    @contextmanager
    def _translate_errors(self) -> Iterator[None]:
        status_errors, connection_errors = self._sdk_errors()
        try:
            yield
        except status_errors as exc:
            raise VertexApiError(exc.status_code, exc.body) from exc  # type: ignore[attr-defined]
        except connection_errors as exc:
            msg = f"anthropic SDK request to {self._region} failed: {exc}"
            raise TransportError(msg) from exc

    def complete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        with self._translate_errors():
            message = self.client.messages.create(model=model, **request.to_sdk_params())
        return ChatCompletionResponse.model_validate(_event_payload(message))

    def stream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> Iterator[ChatCompletionResponse]:
        return stream_chat_completions(self._iter_events(request, model), callbacks)

    def _iter_events(self, request: ChatCompletionRequest, model: str) -> Iterator[Mapping[str, Any]]:
        with self._translate_errors():
            events = self.client.messages.create(model=model, stream=True, **request.to_sdk_params())
            try:
                for event in events:
                    yield _event_payload(event)
            finally:
                close = getattr(events, "close", None)
                if callable(close):
                    close()

    async def acomplete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        with self._translate_errors():
            message = await self.async_client.messages.create(model=model, **request.to_sdk_params())
        return ChatCompletionResponse.model_validate(_event_payload(message))

    def astream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> AsyncIterator[ChatCompletionResponse]:
        return astream_chat_completions(self._aiter_events(request, model), callbacks)

    async def _aiter_events(
        self,
        request: ChatCompletionRequest,
        model: str,
    ) -> AsyncIterator[Mapping[str, Any]]:
        with self._translate_errors():
            events = await self.async_client.messages.create(
                model=model, stream=True, **request.to_sdk_params(),
            )
            try:
                async for event in events:
                    yield _event_payload(event)
            finally:
                close = getattr(events, "close", None)
                if callable(close):
                    await close()


def create_backend(settings: VertexAnthropicSettings | None = None) -> ChatBackend:
    """Return the backend selected by ``settings.backend``."""
    settings = settings or get_settings()
    logger.debug("Using %s backend for project %s", settings.backend, settings.project_id)
    if settings.backend == "sdk":
        return SdkBackend.from_settings(settings)
    return HttpBackend.from_settings(settings)


__all__ = ["HttpBackend", "SdkBackend", "create_backend"]
