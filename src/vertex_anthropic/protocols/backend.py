"""Chat backend protocol.

Any object with these four methods can serve requests for
:class:`~vertex_anthropic.chat.VertexAnthropicChatModel` -- no inheritance
required.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator, Sequence
from typing import Protocol, runtime_checkable

from vertex_anthropic.models.api import ChatCompletionRequest, ChatCompletionResponse

from .callbacks import StreamCallback


@runtime_checkable
class ChatBackend(Protocol):
    """Transport that sends Messages API requests for a given model."""

    def complete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        """Return the full response for a non-streaming request."""
        ...

    def stream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> Iterator[ChatCompletionResponse]:
        """Yield caller-visible chunks of a streamed response.

        Parameters:
            request: The request to send; backends force ``stream=True``.
            model: Model id, e.g. ``"claude-3-5-sonnet@20240620"``.
            callbacks: Observers notified while the stream is reduced.

        Returns:
            Text increments, one chunk per tool-use block, and a terminal
            ``message_stop`` chunk holding the whole message.
        """
        ...

    async def acomplete(self, request: ChatCompletionRequest, model: str) -> ChatCompletionResponse:
        ...

    def astream(
        self,
        request: ChatCompletionRequest,
        model: str,
        callbacks: Sequence[StreamCallback] | None = None,
    ) -> AsyncIterator[ChatCompletionResponse]:
        ...
