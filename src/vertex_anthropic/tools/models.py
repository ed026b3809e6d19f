"""Function tools exposed to Claude during a chat."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from vertex_anthropic.models.api import Tool

_JSON_TYPES: dict[str, type | tuple[type, ...]] = {
    "string": str,
    "number": (int, float),
    "integer": int,
    "boolean": bool,
    "array": list,
    "object": dict,
}


class FunctionTool(BaseModel):
    """A named function the model may invoke with JSON arguments.

    Create one with the ``@tool`` decorator, or directly with a raw
    ``input_schema``.  Results are passed back to the model as text:
    strings verbatim, anything else JSON-encoded.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str
    input_schema: dict[str, Any]
    fn: Callable[..., Any]
    input_model: type[BaseModel] | None = None

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, input_schema=self.input_schema)

    def to_anthropic_schema(self) -> dict[str, Any]:
        return self.to_tool().model_dump()

    def validate_input(self, tool_input: dict[str, Any]) -> tuple[bool, str]:
        """Check ``tool_input`` before calling the function.

        Returns ``(True, "")`` when valid, ``(False, reason)`` otherwise.
        """
        if self.input_model is not None:
            try:
                self.input_model.model_validate(tool_input)
            except ValidationError as exc:
                return False, str(exc)
            return True, ""

        for required in self.input_schema.get("required", []):
            if required not in tool_input:
                return False, f"Missing required field: '{required}'"
        properties: dict[str, Any] = self.input_schema.get("properties", {})
        for key, value in tool_input.items():
            expected = _JSON_TYPES.get(properties.get(key, {}).get("type", ""))
            if expected is not None and not isinstance(value, expected):
                type_name = properties[key]["type"]
                return False, f"Field '{key}' expected type '{type_name}', got '{type(value).__name__}'"
        return True, ""

    def call(self, tool_input: dict[str, Any]) -> str:
        result = self.fn(**tool_input)
        if isinstance(result, str):
            return result
        return json.dumps(result, default=str)
