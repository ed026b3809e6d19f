"""Streaming event aggregation: windowing, tool-use merging and response assembly."""

from .helper import ChatCompletionResponseBuilder, StreamHelper
from .pipeline import (
    SSE_DONE,
    adecode_events,
    areduce_events,
    astream_chat_completions,
    decode_events,
    reduce_events,
    stream_chat_completions,
)
from .windowing import ToolUseWindowPolicy, awindow_tool_use, window_tool_use

__all__ = [
    "SSE_DONE",
    "ChatCompletionResponseBuilder",
    "StreamHelper",
    "ToolUseWindowPolicy",
    "adecode_events",
    "areduce_events",
    "astream_chat_completions",
    "awindow_tool_use",
    "decode_events",
    "reduce_events",
    "stream_chat_completions",
    "window_tool_use",
]
