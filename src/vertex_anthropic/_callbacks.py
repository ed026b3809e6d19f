"""Callback dispatch shared by the stream reducer and the chat model."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

logger = logging.getLogger(__name__)


def fire_callbacks(callbacks: Sequence[Any], hook: str, *args: Any, **kwargs: Any) -> None:
    """Invoke ``hook`` on every callback that defines it.

    Callbacks are observers: a failing callback is logged at WARNING level
    and never interrupts the stream that triggered it.
    """
    for callback in callbacks:
        fn = getattr(callback, hook, None)
        if not callable(fn):
            continue
        try:
            fn(*args, **kwargs)
        except Exception:
            logger.warning("Stream callback %r.%s failed", callback, hook, exc_info=True)
