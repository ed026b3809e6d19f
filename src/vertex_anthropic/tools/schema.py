"""Build tool input schemas from Python function signatures."""

from __future__ import annotations

import inspect
import re
import typing
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, Field, create_model

_ARGS_HEADER = re.compile(r"^Args?:\s*$", re.MULTILINE)
_ARG_LINE = re.compile(r"^\s+(\w+)(?:\s*\([^)]*\))?\s*:\s*(.*)")
_SECTION_HEADERS = ("args:", "arg:", "returns:", "raises:", "note:", "example:")


def describe(fn: Callable[..., Any]) -> str:
    """Return the summary paragraph of ``fn``'s docstring, joined onto one line."""
    doc = inspect.getdoc(fn) or ""
    summary: list[str] = []
    for line in doc.splitlines():
        stripped = line.strip()
        if not stripped:
            if summary:
                break
            continue
        if stripped.lower() in _SECTION_HEADERS:
            break
        summary.append(stripped)
    return " ".join(summary)


def parameter_descriptions(fn: Callable[..., Any]) -> dict[str, str]:
    """Parse the Google-style ``Args:`` section of ``fn``'s docstring."""
    doc = inspect.getdoc(fn) or ""
    header = _ARGS_HEADER.search(doc)
    if header is None:
        return {}

    descriptions: dict[str, str] = {}
    current: str | None = None
    for line in doc[header.end():].splitlines():
        if line and not line[0].isspace():
            break
        match = _ARG_LINE.match(line)
        if match:
            current = match.group(1)
            descriptions[current] = match.group(2).strip()
        elif current is not None and line.strip():
            descriptions[current] = f"{descriptions[current]} {line.strip()}".strip()
    return descriptions


def build_input_model(fn: Callable[..., Any], name: str | None = None) -> type[BaseModel]:
    """Create a Pydantic model whose fields mirror ``fn``'s parameters.

    Parameters without a default are required; ``*args``/``**kwargs`` are
    ignored.  Field descriptions come from the docstring's ``Args:`` section.
    """
    try:
        hints = typing.get_type_hints(fn)
    except (NameError, TypeError):
        hints = dict(getattr(fn, "__annotations__", {}))
    docs = parameter_descriptions(fn)

    fields: dict[str, Any] = {}
    for param in inspect.signature(fn).parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, Any)
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[param.name] = (
            annotation,
            Field(default=default, description=docs.get(param.name) or None),
        )

    return create_model(name or f"{fn.__name__}_input", **fields)


def clean_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Strip Pydantic titles so the schema matches the Messages API tool format."""
    cleaned: dict[str, Any] = {"type": "object"}
    properties = schema.get("properties")
    if properties is not None:
        cleaned["properties"] = {
            key: {k: v for k, v in prop.items() if k != "title"}
            for key, prop in properties.items()
        }
    if "required" in schema:
        cleaned["required"] = list(schema["required"])
    if "$defs" in schema:
        cleaned["$defs"] = schema["$defs"]
    return cleaned


__all__ = ["build_input_model", "clean_schema", "describe", "parameter_descriptions"]
