"""Grouping of stream events into reduction windows.

Outside a tool-use block every event forms its own window.  A tool-use block
(``content_block_start`` of type ``tool_use``, its ``input_json_delta``
events and the closing ``content_block_stop``) forms a single window, so its
argument fragments can be merged in one fold.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from vertex_anthropic.models.events import ErrorEvent, WireEvent

from .helper import StreamHelper

logger = logging.getLogger(__name__)


class ToolUseWindowPolicy:
    """Decides where windows end, one event at a time.

    Holds a single ``inside_tool`` flag; create one policy per stream.
    """

    __slots__ = ("inside_tool",)

    def __init__(self) -> None:
        self.inside_tool = False

    def closes_window(self, event: WireEvent) -> bool:
        """Return True when ``event`` is the last event of the current window.

        A server ``error`` event always ends the window, even inside a
        tool-use block, so the error reaches the reducer.
        """
        if isinstance(event, ErrorEvent):
            self.inside_tool = False
            return True
        if not self.inside_tool and StreamHelper.is_tool_use_start(event):
            self.inside_tool = True
        if self.inside_tool:
            if StreamHelper.is_tool_use_finish(event):
                self.inside_tool = False
                return True
            return False
        return True


def _discard(window: list[WireEvent]) -> None:
    logger.debug(
        "Stream ended inside a tool-use block; discarding %d buffered events",
        len(window),
    )


def window_tool_use(events: Iterable[WireEvent]) -> Iterator[list[WireEvent]]:
    """Split ``events`` lazily into reduction windows.

    An unterminated tool-use window at the end of the input is dropped.
    """
    policy = ToolUseWindowPolicy()
    window: list[WireEvent] = []
    for event in events:
        window.append(event)
        if policy.closes_window(event):
            yield window
            window = []
    if window:
        _discard(window)


async def awindow_tool_use(events: AsyncIterable[WireEvent]) -> AsyncIterator[list[WireEvent]]:
    """Async variant of :func:`window_tool_use`."""
    policy = ToolUseWindowPolicy()
    window: list[WireEvent] = []
    async for event in events:
        window.append(event)
        if policy.closes_window(event):
            yield window
            window = []
    if window:
        _discard(window)


__all__ = ["ToolUseWindowPolicy", "awindow_tool_use", "window_tool_use"]
