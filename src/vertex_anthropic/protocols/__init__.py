"""Protocol definitions for vertex-anthropic's pluggable parts."""

from .backend import ChatBackend
from .callbacks import StreamCallback

__all__ = ["ChatBackend", "StreamCallback"]
