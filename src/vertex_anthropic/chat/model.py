"""Chat model for Claude on Vertex AI with automatic tool execution."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator, Sequence
from typing import Any

from vertex_anthropic._callbacks import fire_callbacks
from vertex_anthropic.exceptions import ConfigurationError
from vertex_anthropic.models.api import ChatCompletionRequest, ChatCompletionResponse
from vertex_anthropic.models.events import EventType
from vertex_anthropic.protocols.backend import ChatBackend
from vertex_anthropic.protocols.callbacks import StreamCallback
from vertex_anthropic.settings import VertexAnthropicSettings, get_settings
from vertex_anthropic.tools.models import FunctionTool

from .backends import create_backend
from .formatter import AnthropicFormatter
from .messages import ChatResponse, Generation, Message, Prompt, ToolCall
from .options import VertexAnthropicChatOptions

logger = logging.getLogger(__name__)

_TOOL_USE_STOP_REASON = "tool_use"


class VertexAnthropicChatModel:
    """Chat model that runs the model's tool calls and re-submits the results.

    When a response stops with ``tool_use``, every requested tool is executed,
    the assistant turn and the tool results are appended to the conversation,
    and the model is called again, for at most ``max_rounds`` model calls.
    Unknown tools, invalid arguments and tool exceptions are reported back to
    the model as error results rather than raised.

    Usage::

        @tool
        def get_weather(location: str) -> str:
            \"\"\"Get the current weather in a given location.\"\"\"
            return "sunny"

        model = VertexAnthropicChatModel.from_settings().with_tools([get_weather])
        for chunk in model.stream("What's the weather in Paris?"):
            print(chunk.text, end="")
    """

    __slots__ = (
        "_backend",
        "_callbacks",
        "_default_options",
        "_formatter",
        "_max_rounds",
        "_tools",
    )

    def __init__(
        self,
        backend: ChatBackend,
        *,
        default_options: VertexAnthropicChatOptions | None = None,
        tools: Sequence[FunctionTool] | None = None,
        callbacks: Sequence[StreamCallback] | None = None,
        max_rounds: int = 10,
    ) -> None:
        if max_rounds < 1:
            msg = "max_rounds must be >= 1"
            raise ValueError(msg)
        self._backend = backend
        self._default_options = (default_options or VertexAnthropicChatOptions()).merged_with(
            VertexAnthropicChatOptions.defaults(),
        )
        self._tools: dict[str, FunctionTool] = {}
        self._callbacks: list[StreamCallback] = list(callbacks or [])
        self._formatter = AnthropicFormatter()
        self._max_rounds = max_rounds
        self.with_tools(tools or [])

    @classmethod
    def from_settings(
        cls,
        settings: VertexAnthropicSettings | None = None,
        **kwargs: Any,
    ) -> VertexAnthropicChatModel:
        settings = settings or get_settings()
        kwargs.setdefault("default_options", VertexAnthropicChatOptions.from_settings(settings))
        return cls(create_backend(settings), **kwargs)

    # -- Fluent configuration (all return self) --

    def with_tools(self, tools: Sequence[FunctionTool]) -> VertexAnthropicChatModel:
        for function_tool in tools:
            self._tools[function_tool.name] = function_tool
        return self

    def with_callbacks(self, callbacks: Sequence[StreamCallback]) -> VertexAnthropicChatModel:
        self._callbacks.extend(callbacks)
        return self

    @property
    def default_options(self) -> VertexAnthropicChatOptions:
        return self._default_options

    @property
    def tools(self) -> list[FunctionTool]:
        return list(self._tools.values())

    @property
    def backend(self) -> ChatBackend:
        return self._backend

    # -- Internal helpers --

    def _enabled_tools(self, options: VertexAnthropicChatOptions) -> list[FunctionTool]:
        if options.tools is None:
            return self.tools
        unknown = [name for name in options.tools if name not in self._tools]
        if unknown:
            msg = f"No registered tool named {', '.join(map(repr, unknown))}"
            raise ConfigurationError(msg)
        return [self._tools[name] for name in options.tools]

    def _prepare(self, prompt: Prompt, *, stream: bool) -> tuple[ChatCompletionRequest, str]:
        options = (prompt.options or VertexAnthropicChatOptions()).merged_with(self._default_options)
        if not options.model:
            msg = "No model configured"
            raise ConfigurationError(msg)
        request = self._formatter.format(prompt, options, self._enabled_tools(options), stream=stream)
        return request, options.model

    def _execute_tool(self, call: ToolCall) -> Message:
        """Run one tool call and wrap its outcome as a tool message."""
        function_tool = self._tools.get(call.name)
        if function_tool is None:
            logger.warning("Model requested unknown tool '%s'", call.name)
            return Message.tool(call.id, f"Unknown tool: {call.name}", name=call.name, is_error=True)

        valid, err = function_tool.validate_input(call.arguments)
        if not valid:
            logger.warning("Tool '%s' input validation failed: %s", call.name, err)
            content = f"Error: invalid input for tool '{call.name}': {err}"
            return Message.tool(call.id, content, name=call.name, is_error=True)
        try:
            result = function_tool.call(call.arguments)
        except Exception:
            logger.exception("Tool '%s' failed", call.name)
            return Message.tool(call.id, f"Error: tool '{call.name}' failed.", name=call.name, is_error=True)
        return Message.tool(call.id, result, name=call.name)

    def _follow_up(self, prompt: Prompt, response: ChatResponse) -> Prompt | None:
        """Return the next prompt if ``response`` asks for tools, else ``None``."""
        result = response.result
        if (
            result is None
            or response.metadata.stop_reason != _TOOL_USE_STOP_REASON
            or not result.message.tool_calls
        ):
            return None
        logger.debug("Executing %d tool call(s)", len(result.message.tool_calls))
        tool_messages = [self._execute_tool(call) for call in result.message.tool_calls]
        return prompt.with_messages([*prompt.messages, result.message, *tool_messages])

    def _chunk(self, chunk: ChatCompletionResponse) -> ChatResponse:
        if chunk.type == EventType.MESSAGE_STOP:
            # Terminal chunk: the content was already streamed as increments.
            generation = Generation(message=Message.assistant(), finish_reason=chunk.stop_reason)
            return ChatResponse(generations=[generation], metadata=self._formatter.metadata(chunk))
        return self._formatter.parse(chunk)

    @staticmethod
    def _as_prompt(prompt: Prompt | str) -> Prompt:
        return Prompt.of(prompt) if isinstance(prompt, str) else prompt

    def _rounds_exhausted(self) -> None:
        logger.warning("Stopped after %d model calls with tool calls still pending", self._max_rounds)

    # -- Calls --

    def call(self, prompt: Prompt | str) -> ChatResponse:
        """Return the model's final response, running requested tools in between."""
        current = self._as_prompt(prompt)
        for _ in range(self._max_rounds):
            request, model = self._prepare(current, stream=False)
            raw = self._backend.complete(request, model)
            fire_callbacks(self._callbacks, "on_stream_complete", raw)
            response = self._formatter.parse(raw)
            follow_up = self._follow_up(current, response)
            if follow_up is None:
                return response
            current = follow_up
        self._rounds_exhausted()
        return response

    async def acall(self, prompt: Prompt | str) -> ChatResponse:
        """Async variant of :meth:`call`."""
        current = self._as_prompt(prompt)
        for _ in range(self._max_rounds):
            request, model = self._prepare(current, stream=False)
            raw = await self._backend.acomplete(request, model)
            fire_callbacks(self._callbacks, "on_stream_complete", raw)
            response = self._formatter.parse(raw)
            follow_up = self._follow_up(current, response)
            if follow_up is None:
                return response
            current = follow_up
        self._rounds_exhausted()
        return response

    def stream(self, prompt: Prompt | str) -> Iterator[ChatResponse]:
        """Stream the response as increments.

        Text arrives in deltas, each tool call as one chunk, and every model
        call ends with a chunk carrying the stop reason and usage.  Tool
        rounds continue streaming in the same iterator.
        """
        current = self._as_prompt(prompt)
        for _ in range(self._max_rounds):
            request, model = self._prepare(current, stream=True)
            terminal: ChatCompletionResponse | None = None
            for chunk in self._backend.stream(request, model, self._callbacks):
                if chunk.type == EventType.MESSAGE_STOP:
                    terminal = chunk
                yield self._chunk(chunk)
            if terminal is None:
                return
            follow_up = self._follow_up(current, self._formatter.parse(terminal))
            if follow_up is None:
                return
            current = follow_up
        self._rounds_exhausted()

    async def astream(self, prompt: Prompt | str) -> AsyncIterator[ChatResponse]:
        """Async variant of :meth:`stream`."""
        current = self._as_prompt(prompt)
        for _ in range(self._max_rounds):
            request, model = self._prepare(current, stream=True)
            terminal: ChatCompletionResponse | None = None
            async for chunk in self._backend.astream(request, model, self._callbacks):
                if chunk.type == EventType.MESSAGE_STOP:
                    terminal = chunk
                yield self._chunk(chunk)
            if terminal is None:
                return
            follow_up = self._follow_up(current, self._formatter.parse(terminal))
            if follow_up is None:
                return
            current = follow_up
        self._rounds_exhausted()


__all__ = ["VertexAnthropicChatModel"]
