"""Configuration management commands.

This module provides CLI commands for configuration management:
- show: Display current configuration
- get: Get a specific configuration value
- init: Write a configuration file template
- validate: Report configuration warnings
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from http_remote.config import GLOBAL_CONFIG_PATH, Config
from http_remote.container import get_config
from http_remote.formatters import format_json, format_success, format_warning

app = typer.Typer(
    name="config",
    help="Manage remote configuration",
    no_args_is_help=True,
)

console = Console()

SECRET_KEYS = {"csrf_token"}


def _redacted(config: Config) -> dict[str, Any]:
    data = config.to_dict()
    for key in SECRET_KEYS:
        if data["remote"].get(key):
            data["remote"][key] = "***"
    return data


@app.command()
def show(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output in JSON format",
        ),
    ] = False,
) -> None:
    """Display current configuration.

    Configuration precedence:
    1. Environment variables (HTTP_REMOTE_*)
    2. Configuration files (.http-remote.yaml, ~/.http-remote/config.yaml)
    3. Defaults

    Examples:
        http-remote config show
        http-remote config show --json
    """
    try:
        config = get_config()
        data = _redacted(config)

        if json_output:
            print(format_json(data))
            return

        console.print("[bold]Current Configuration[/bold]\n")
        for section, values in data.items():
            table = Table(title=f"{section.title()} Settings", show_header=True)
            table.add_column("Setting", style="cyan")
            table.add_column("Value", style="green")
            for setting, value in values.items():
                table.add_row(setting, "Not set" if value is None else str(value))
            console.print(table)
            console.print()

        console.print("[dim]Set via environment variables, e.g.:[/dim]")
        console.print("[dim]  HTTP_REMOTE_REMOTE__BASE_URL, HTTP_REMOTE_REMOTE__ENDPOINT[/dim]")

    except Exception as e:
        console.print(f"[red]Error reading configuration:[/red] {str(e)}")
        raise typer.Exit(1)


@app.command()
def get(
    key: Annotated[
        str,
        typer.Argument(
            help="Configuration key to retrieve (e.g., 'remote.base_url')",
        ),
    ],
) -> None:
    """Get a specific configuration value.

    Examples:
        http-remote config get remote.endpoint
        http-remote config get output.format
    """
    parts = key.split(".")
    if len(parts) != 2:
        console.print(
            f"[red]Invalid key format:[/red] '{key}'. "
            "Use dot notation (e.g., 'remote.base_url')"
        )
        raise typer.Exit(2)

    section, setting = parts
    try:
        data = _redacted(get_config())
    except Exception as e:
        console.print(f"[red]Error reading configuration:[/red] {str(e)}")
        raise typer.Exit(1)

    if section not in data:
        console.print(
            f"[red]Unknown configuration section:[/red] '{section}'. "
            f"Valid sections: {', '.join(data)}"
        )
        raise typer.Exit(2)

    if setting not in data[section]:
        console.print(
            f"[red]Unknown {section} setting:[/red] '{setting}'. "
            f"Valid options: {', '.join(data[section])}"
        )
        raise typer.Exit(2)

    console.print(f"{data[section][setting]}")


@app.command()
def init(
    path: Annotated[
        Path,
        typer.Option(
            "--path",
            "-p",
            help="Configuration file to create",
        ),
    ] = GLOBAL_CONFIG_PATH,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing configuration file",
        ),
    ] = False,
) -> None:
    """Initialize a configuration file from the template.

    Examples:
        http-remote config init
        http-remote config init --path ./.http-remote.yaml --force
    """
    if path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {path}\n"
            "Use --force to overwrite"
        )
        raise typer.Exit(1)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(Config.get_template())
    except OSError as e:
        console.print(f"[red]Error writing configuration:[/red] {str(e)}")
        raise typer.Exit(1)

    console.print(format_success(f"Configuration written to {path}"))


@app.command()
def validate() -> None:
    """Validate configuration and print warnings.

    Exits with code 1 when the configuration cannot be loaded.
    """
    try:
        config = get_config()
    except Exception as e:
        console.print(f"[red]Invalid configuration:[/red] {str(e)}")
        raise typer.Exit(1)

    warnings = config.validate_config()
    if not warnings:
        console.print(format_success("Configuration is valid"))
        return

    for warning in warnings:
        console.print(format_warning(warning))
