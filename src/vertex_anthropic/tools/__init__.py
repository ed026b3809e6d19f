"""Function tools for the chat model's tool-call loop."""

from .decorator import tool
from .models import FunctionTool
from .schema import build_input_model, clean_schema

__all__ = ["FunctionTool", "build_input_model", "clean_schema", "tool"]
