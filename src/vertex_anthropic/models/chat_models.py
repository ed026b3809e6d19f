"""Claude model identifiers available on Vertex AI.

See https://cloud.google.com/vertex-ai/generative-ai/docs/partner-models/use-claude
for the current list.  Any other model id string is accepted as well.
"""

from __future__ import annotations

from enum import StrEnum


class ChatModels(StrEnum):
    CLAUDE_3_5_SONNET = "claude-3-5-sonnet@20240620"
    CLAUDE_3_OPUS = "claude-3-opus@20240229"
    CLAUDE_3_SONNET = "claude-3-sonnet@20240229"
    CLAUDE_3_HAIKU = "claude-3-haiku@20240307"


DEFAULT_CHAT_MODEL = ChatModels.CLAUDE_3_5_SONNET
