"""Command-line interface for halgraph."""

import asyncio
import json
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .config import AppConfig, load_config
from .core.embedder import parse_embed_paths
from .core.links import expand_uri
from .core.state import to_document, to_state
from .hal.client import HALClient
from .observability.logger import configure_logging
from .utils.exceptions import HALGraphError

app = typer.Typer(
    name="halgraph",
    help="Fetch HAL resources and embed linked resources",
    add_completion=False,
)

console = Console()
logger = structlog.get_logger(__name__)


def _setup(config_file: Path | None, log_level: str | None, json_logs: bool) -> AppConfig:
    """Load configuration and configure logging, exiting with code 1 on bad config."""
    try:
        config = load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]ERROR:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    configure_logging(
        level=log_level or config.logging.level,
        json_logs=json_logs or config.logging.json_logs,
        log_file=config.logging.file,
    )
    return config


def _parse_pairs(values: list[str] | None, separator: str, what: str) -> dict[str, str]:
    pairs: dict[str, str] = {}
    for value in values or []:
        key, sep, rest = value.partition(separator)
        if not sep or not key.strip():
            console.print(f"[bold red]ERROR:[/bold red] Invalid {what}: {value!r}")
            raise typer.Exit(code=1)
        pairs[key.strip()] = rest.strip()
    return pairs


@app.command()
def get(
    uri: str = typer.Argument(..., help="Resource URI (or URI Template with --param)"),
    embeds: list[str] | None = typer.Option(
        None, "--embed", "-e", help="Relation path to embed, e.g. author.friends (repeatable)"
    ),
    params: list[str] | None = typer.Option(
        None, "--param", "-p", help="URI Template parameter name=value (repeatable)"
    ),
    headers: list[str] | None = typer.Option(
        None, "--header", "-H", help="Extra request header 'Name: value' (repeatable)"
    ),
    state: bool = typer.Option(False, "--state", help="Print only the resource state"),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON"),
) -> None:
    """
    Fetch a HAL resource and embed linked resources.

    Every resource is requested once, however often it is linked. A resource
    embedded inside itself is printed as a stub holding its self link.

    Examples:
        halgraph get https://api.example.com/orders/1 -e customer -e items.product
        halgraph get "https://api.example.com/orders{?page}" -p page=2
        halgraph get /orders/1 --state -c halgraph.yaml
    """
    config = _setup(config_file, log_level, json_logs)

    try:
        embed_request = parse_embed_paths(embeds or [])
    except ValueError as e:
        console.print(f"[bold red]ERROR:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    template_params = _parse_pairs(params, "=", "parameter")
    request_headers = _parse_pairs(headers, ":", "header")
    options = {"headers": request_headers} if request_headers else None

    async def run_get():
        target = expand_uri(uri, template_params) if template_params else uri
        async with HALClient(config.hal) as client:
            return await client.get_hal(target, embed_request, options)

    try:
        resource = asyncio.run(run_get())
    except HALGraphError as e:
        console.print(f"[bold red]ERROR:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    console.print_json(data=to_state(resource) if state else to_document(resource))


@app.command()
def put(
    document_file: Path = typer.Argument(..., help="JSON file holding a HAL resource", exists=True),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Configuration file"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON"),
) -> None:
    """
    PUT the state of a HAL resource back to its self href.

    `_links` and `_embedded` are stripped from the body.

    Examples:
        halgraph put order.json
    """
    config = _setup(config_file, log_level, json_logs)

    try:
        resource = json.loads(document_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[bold red]ERROR:[/bold red] Invalid JSON in {document_file}: {e}")
        raise typer.Exit(code=1) from e

    if not isinstance(resource, dict):
        console.print("[bold red]ERROR:[/bold red] The document must be a JSON object")
        raise typer.Exit(code=1)

    async def run_put():
        async with HALClient(config.hal) as client:
            return await client.put_state(resource)

    try:
        result = asyncio.run(run_put())
    except HALGraphError as e:
        console.print(f"[bold red]ERROR:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    console.print("[green]State written.[/green]")
    if result is not None:
        console.print_json(data=result)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel.fit(
            "[bold]halgraph[/bold]\n\n"
            f"Version: [cyan]{__version__}[/cyan]\n\n"
            "[bold]Features:[/bold]\n"
            "- Embeds linked HAL resources to any requested depth\n"
            "- One request per resource, even for cyclic links\n"
            "- URI Template expansion\n"
            "- PUT of resource state",
            title="About",
            border_style="blue",
        )
    )
