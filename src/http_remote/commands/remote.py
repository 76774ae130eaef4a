"""Remote commands.

This module provides CLI commands that talk to the configured remote:
- send: Transmit a JSON payload and print the decoded response
- flags: Show the remote's behaviour flags
"""

from __future__ import annotations

from typing import Annotated, Any
import asyncio
import json

import typer
from rich.console import Console

from http_remote.container import close_container, get_client, get_remote
from http_remote.exceptions import NetworkError, RemoteError
from http_remote.formatters import (
    format_error,
    format_json,
    format_response,
    response_to_dict,
)
from http_remote.models import ProgressUpdate, WireResponse
from http_remote.progress import overall_progress

app = typer.Typer(
    name="remote",
    help="Send requests to the configured remote",
    no_args_is_help=True,
)

console = Console()


async def _send(payload: Any, abort_id: str | None, show_progress: bool) -> WireResponse:
    def on_progress(update: ProgressUpdate) -> None:
        console.print(f"[dim]{update.progress.value} {overall_progress(update)}%[/dim]")

    try:
        return await get_client().send(
            payload,
            abort_id=abort_id,
            on_progress=on_progress if show_progress else None,
        )
    finally:
        await close_container()


@app.command()
def send(
    payload: Annotated[
        str,
        typer.Argument(help="JSON payload to transmit"),
    ],
    abort_id: Annotated[
        str | None,
        typer.Option("--abort-id", "-a", help="Abort identity for the request"),
    ] = None,
    progress: Annotated[
        bool,
        typer.Option("--progress", "-p", help="Print progress updates"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output in JSON format"),
    ] = False,
) -> None:
    """Transmit a payload and print the response.

    Examples:
        http-remote remote send '{"op": "ping"}'
        http-remote remote send '{"op": "load"}' --progress --json
    """
    try:
        value = json.loads(payload)
    except json.JSONDecodeError as e:
        console.print(format_error(f"Invalid JSON payload: {e}"))
        raise typer.Exit(2)

    try:
        response = asyncio.run(_send(value, abort_id, progress))
    except NetworkError as e:
        console.print(format_error(str(e)))
        if json_output:
            print(format_json(response_to_dict(e.response)))
        else:
            console.print(format_response(e.response, title="Failed Response"))
        raise typer.Exit(1)
    except RemoteError as e:
        console.print(format_error(f"{e.kind.value if e.kind else 'error'}: {e}"))
        raise typer.Exit(1)

    if json_output:
        print(format_json(response_to_dict(response)))
    else:
        console.print(format_response(response))


@app.command()
def flags(
    json_output: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output in JSON format"),
    ] = False,
) -> None:
    """Show the behaviour flags advertised by the remote."""
    behavior = get_remote().behavior_flags()
    if json_output:
        print(format_json(behavior.model_dump()))
        return

    for name, value in behavior.model_dump().items():
        console.print(f"[cyan]{name}[/cyan]: {value}")
