"""``@tool`` decorator turning a plain function into a :class:`FunctionTool`."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, overload

from pydantic import BaseModel

from .models import FunctionTool
from .schema import build_input_model, clean_schema, describe


@overload
def tool(fn: Callable[..., Any]) -> FunctionTool: ...


@overload
def tool(
    fn: None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    input_model: type[BaseModel] | None = None,
) -> Callable[[Callable[..., Any]], FunctionTool]: ...


def tool(
    fn: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    input_model: type[BaseModel] | None = None,
) -> FunctionTool | Callable[[Callable[..., Any]], FunctionTool]:
    """Wrap a function as a tool; usable bare or with arguments::

        @tool
        def weather(location: str, unit: str = "C") -> dict:
            \"\"\"Get the current weather in a given location.

            Args:
                location: City name, e.g. "San Francisco".
                unit: Temperature unit, C or F.
            \"\"\"

        @tool(name="WeatherInfo", input_model=WeatherRequest)
        def weather(location: str, unit: str) -> dict: ...
    """

    def wrap(func: Callable[..., Any]) -> FunctionTool:
        model = input_model or build_input_model(func, name=f"{name or func.__name__}_input")
        return FunctionTool(
            name=name or func.__name__,
            description=description or describe(func) or (name or func.__name__),
            input_schema=clean_schema(model.model_json_schema()),
            fn=func,
            input_model=model,
        )

    if fn is not None:
        return wrap(fn)
    return wrap
