"""Main CLI entry point for http-remote."""

from __future__ import annotations

import sys
from typing import Annotated

import typer
from rich.console import Console

from http_remote import __version__
from http_remote.commands import config, remote

app = typer.Typer(
    name="http-remote",
    help="http-remote CLI - Send application transactions to an HTTP remote",
    epilog="Settings: defaults < global config < project config < HTTP_REMOTE_* env vars.",
    no_args_is_help=True,
    add_completion=False,
)

# Register command groups
app.add_typer(remote.app, name="remote")
app.add_typer(config.app, name="config")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"http-remote version: {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    http-remote CLI - Send transactions through an HTTP remote.

    'remote send' posts a payload through the default middleware and prints
    the decoded response. 'remote flags' shows the behaviour flags. The
    'config' group shows, initialises and validates settings.
    """


def cli_main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
