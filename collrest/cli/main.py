"""Main entry point for the collrest command line."""

from pathlib import Path
from typing import Annotated

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from collrest._version import __version__
from collrest.config.settings import ConfigurationError, PathStyle, RestSettings
from collrest.controller.declaration import MiddlewareKind
from collrest.core.logging import get_logger, setup_logging
from collrest.demo import create_demo_app


app = typer.Typer(
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console()
logger = get_logger(__name__)

DefinitionsOption = Annotated[
    Path,
    typer.Option(
        "--definitions",
        "-d",
        help="TOML file with [collections.*] definitions and an optional [users] table",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="TOML file with plugin settings",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]
PathStyleOption = Annotated[
    PathStyle | None,
    typer.Option("--path-style", help="Route table layout"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"collrest {__version__}")
        raise typer.Exit()


@app.callback()
def app_main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
) -> None:
    """Generic REST API for collection-based content hosts."""


def _settings(config: Path | None, path_style: PathStyle | None) -> RestSettings:
    overrides = {"path_style": path_style} if path_style else None
    try:
        return RestSettings.from_config(overrides, config_path=config)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def serve(
    definitions: DefinitionsOption,
    config: ConfigOption = None,
    path_style: PathStyleOption = None,
    host: Annotated[str, typer.Option("--host", help="Host to bind to")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", min=1, max=65535)] = 8000,
) -> None:
    """Run a demo server with in-memory collections."""
    settings = _settings(config, path_style)
    setup_logging(
        json_logs=settings.logging.format == "json",
        log_level_name=settings.logging.level,
    )
    server, _ = create_demo_app(definitions, settings)

    logger.info(
        "server_starting",
        host=host,
        port=port,
        url=f"http://{host}:{port}{settings.base_path}",
    )
    uvicorn.run(server, host=host, port=port, log_config=None, server_header=False)


@app.command()
def routes(
    definitions: DefinitionsOption,
    config: ConfigOption = None,
    path_style: PathStyleOption = None,
) -> None:
    """Print the route table the plugin binds."""
    settings = _settings(config, path_style)
    _, plugin = create_demo_app(definitions, settings)
    if plugin.controller is None:
        raise typer.Exit(1)

    table = Table(title=f"collrest routes under {settings.base_path}")
    table.add_column("Method", style="cyan")
    table.add_column("Path")
    table.add_column("Name", style="dim")
    for spec in plugin.controller.middleware:
        if spec.kind is MiddlewareKind.ROUTE:
            table.add_row(spec.method or "GET", spec.path, spec.name)
    console.print(table)


def main() -> None:
    app()
