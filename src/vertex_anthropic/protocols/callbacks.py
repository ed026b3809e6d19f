"""Observer protocol for stream reduction events."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from vertex_anthropic.models.api import ChatCompletionResponse, ContentBlock


@runtime_checkable
class StreamCallback(Protocol):
    """Receives notifications while a response stream is reduced.

    Implementations may define any subset of the hooks; missing hooks are
    skipped.  Exceptions raised by a hook are logged and ignored.
    """

    def on_tool_use(self, block: ContentBlock) -> None:
        """Called once per tool invocation, after its arguments are parsed."""
        ...

    def on_malformed_tool_input(self, tool_id: str, name: str, raw_json: str) -> None:
        """Called when a tool invocation's argument buffer is not a JSON object.

        The invocation continues with empty arguments.
        """
        ...

    def on_stream_complete(self, response: ChatCompletionResponse) -> None:
        """Called with the terminal response of a stream.

        The chat model also calls it once per non-streaming model call.
        """
        ...
