"""CLI interface for vertex-anthropic.

Requires the 'cli' extra: pip install vertex-anthropic[cli]
"""

from __future__ import annotations

import logging
import sys

try:
    import typer
    from rich.console import Console
    from rich.table import Table
except ImportError:
    print(
        "CLI dependencies not installed. Install with: pip install vertex-anthropic[cli]",
        file=sys.stderr,
    )
    sys.exit(1)

from pydantic import ValidationError

from vertex_anthropic import __version__
from vertex_anthropic.chat import Prompt, VertexAnthropicChatModel, VertexAnthropicChatOptions
from vertex_anthropic.exceptions import VertexAnthropicError
from vertex_anthropic.models.chat_models import ChatModels
from vertex_anthropic.settings import VertexAnthropicSettings

app = typer.Typer(
    name="vertex-anthropic",
    help="Chat with Anthropic Claude models on Google Vertex AI.",
    add_completion=False,
)
console = Console()


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-v", help="Show version"),
    verbose: bool = typer.Option(False, "--verbose", help="Log stream events to stderr"),
) -> None:
    if version:
        console.print(f"vertex-anthropic {__version__}")
        raise typer.Exit()
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def info() -> None:
    """Show the installed version and the active configuration."""
    table = Table(title="vertex-anthropic info")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Version", __version__)
    table.add_row("Python", sys.version.split()[0])

    settings = VertexAnthropicSettings()
    table.add_row("Project", settings.project_id or "[red]not set[/red]")
    table.add_row("Location", settings.location)
    table.add_row("Model", settings.model)
    table.add_row("Backend", settings.backend)

    for dep_name in ["pydantic", "httpx", "anthropic"]:
        try:
            mod = __import__(dep_name)
            ver = getattr(mod, "__version__", "installed")
            table.add_row(dep_name, str(ver))
        except ImportError:
            table.add_row(dep_name, "[red]not installed[/red]")

    console.print(table)


@app.command()
def models() -> None:
    """List the Claude model ids known to this client."""
    table = Table(title="Claude models on Vertex AI")
    table.add_column("Name", style="cyan")
    table.add_column("Model id", style="green")
    for chat_model in ChatModels:
        table.add_row(chat_model.name, chat_model.value)
    console.print(table)


def _build_model(settings: VertexAnthropicSettings) -> VertexAnthropicChatModel:
    return VertexAnthropicChatModel.from_settings(settings)


@app.command()
def chat(
    prompt: str = typer.Argument(..., help="Message to send"),
    model: str | None = typer.Option(None, "--model", "-m", help="Model id"),
    stream: bool = typer.Option(True, "--stream/--no-stream", help="Stream the response"),
    backend: str | None = typer.Option(None, "--backend", "-b", help="Backend: http|sdk"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", "-t", help="Max response tokens"),
) -> None:
    """Send a single message and print the reply."""
    overrides: dict[str, object] = {}
    if backend is not None:
        overrides["backend"] = backend
    try:
        settings = VertexAnthropicSettings(**overrides)
    except ValidationError as exc:
        console.print(f"[red]Error: invalid configuration: {exc.errors()[0]['msg']}[/red]")
        raise typer.Exit(code=1) from None

    options = VertexAnthropicChatOptions(model=model, max_tokens=max_tokens)
    request = Prompt.of(prompt, options)
    try:
        chat_model = _build_model(settings)
        if stream:
            for chunk in chat_model.stream(request):
                console.print(chunk.text, end="", markup=False, highlight=False)
            console.print()
        else:
            console.print(chat_model.call(request).text, markup=False, highlight=False)
    except VertexAnthropicError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(code=1) from None


if __name__ == "__main__":
    app()
