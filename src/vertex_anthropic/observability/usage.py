"""Token usage tracking across chat calls and streams."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from vertex_anthropic.models.api import ChatCompletionResponse

logger = logging.getLogger(__name__)


class UsageEntry(BaseModel):
    """Token usage of a single model response.

    Parameters:
        model: The model identifier that produced the response.
        response_id: The message id reported by the API, if any.
        input_tokens: Number of input tokens consumed.
        output_tokens: Number of output tokens produced.
        cache_creation_input_tokens: Input tokens written to the prompt cache.
        cache_read_input_tokens: Input tokens served from the prompt cache.
        timestamp: When the response completed.
    """

    model_config = ConfigDict(frozen=True)

    model: str
    response_id: str | None = None
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class UsageSummary(BaseModel):
    """Aggregated usage across recorded responses.

    ``by_model`` maps each model id to its total (input + output) tokens.
    """

    model_config = ConfigDict(frozen=True)

    requests: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_creation_input_tokens: int = 0
    total_cache_read_input_tokens: int = 0
    entries: list[UsageEntry] = Field(default_factory=list)
    by_model: dict[str, int] = Field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens


class UsageTracker:
    """Thread-safe accumulator of token usage.

    Implements the ``on_stream_complete`` hook of
    :class:`~vertex_anthropic.protocols.StreamCallback`, so it can be passed
    straight to a client or chat model as a callback.

    Usage::

        tracker = UsageTracker()
        model = VertexAnthropicChatModel.from_settings(callbacks=[tracker])
        model.call("Hello")
        print(tracker.summary().total_tokens)
    """

    __slots__ = ("_entries", "_lock")

    def __init__(self) -> None:
        self._entries: list[UsageEntry] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        with self._lock:
            count = len(self._entries)
        return f"UsageTracker(entries={count})"

    def record(self, response: ChatCompletionResponse) -> UsageEntry | None:
        """Record the usage reported on ``response``.

        Returns the created entry, or ``None`` when the response reports no usage.
        """
        usage = response.usage
        if usage is None:
            logger.debug("Response %s carries no usage; nothing recorded", response.id)
            return None
        entry = UsageEntry(
            model=response.model or "unknown",
            response_id=response.id,
            input_tokens=usage.input_tokens or 0,
            output_tokens=usage.output_tokens or 0,
            cache_creation_input_tokens=usage.cache_creation_input_tokens or 0,
            cache_read_input_tokens=usage.cache_read_input_tokens or 0,
        )
        with self._lock:
            self._entries.append(entry)
        return entry

    def on_stream_complete(self, response: ChatCompletionResponse) -> None:
        self.record(response)

    def summary(self) -> UsageSummary:
        with self._lock:
            entries = list(self._entries)

        by_model: dict[str, int] = {}
        for entry in entries:
            by_model[entry.model] = by_model.get(entry.model, 0) + entry.total_tokens

        return UsageSummary(
            requests=len(entries),
            total_input_tokens=sum(e.input_tokens for e in entries),
            total_output_tokens=sum(e.output_tokens for e in entries),
            total_cache_creation_input_tokens=sum(e.cache_creation_input_tokens for e in entries),
            total_cache_read_input_tokens=sum(e.cache_read_input_tokens for e in entries),
            entries=entries,
            by_model=by_model,
        )

    def reset(self) -> None:
        """Clear all recorded entries."""
        with self._lock:
            self._entries.clear()

    @property
    def entries(self) -> list[UsageEntry]:
        with self._lock:
            return list(self._entries)


__all__ = ["UsageEntry", "UsageSummary", "UsageTracker"]
