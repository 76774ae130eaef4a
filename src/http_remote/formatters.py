"""Output formatters for the http-remote CLI.

Provides two output formats:
- JSON: Machine-readable format for scripting
- Table: Human-readable response summary (default)

Color is auto-detected and disabled for piped output.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from http_remote.models import ErrorCode, WireResponse


def _should_use_color() -> bool:
    """Determine if color output should be used.

    Color is disabled when:
    - Output is piped (not a TTY)
    - NO_COLOR environment variable is set
    - TERM is set to "dumb"
    """
    if os.environ.get("NO_COLOR"):
        return False

    if os.environ.get("TERM") == "dumb":
        return False

    return sys.stdout.isatty()


def _get_console(force_color: bool | None = None) -> Console:
    """Get a Rich Console with appropriate color settings.

    Args:
        force_color: If True, force color output. If False, disable color.
                    If None, auto-detect based on environment.
    """
    if force_color is None:
        force_color = _should_use_color()

    return Console(
        force_terminal=force_color,
        no_color=not force_color,
        legacy_windows=False,
    )


def format_json(data: Any, pretty: bool = True) -> str:
    """Format data as JSON.

    Values JSON cannot represent (UUIDs, dates, tagged values) are rendered
    with ``str``.
    """
    if pretty:
        return json.dumps(data, indent=2, sort_keys=False, ensure_ascii=False, default=str)
    return json.dumps(data, ensure_ascii=False, default=str)


def response_to_dict(response: WireResponse) -> dict[str, Any]:
    """Summarize a response for display, without the outgoing request."""
    return {
        "status_code": response.status_code,
        "status_text": response.status_text,
        "error_code": response.error_code.value,
        "error_text": response.error_text,
        "body": response.body,
    }


def format_response(
    response: WireResponse,
    title: str = "Response",
    force_color: bool | None = None,
) -> str:
    """Format a response as a two-column rich table.

    Args:
        response: Response to display
        title: Table title
        force_color: Force color output (None for auto-detect)

    Returns:
        Formatted table string
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value", overflow="fold")

    table.add_row("Status", f"{response.status_code} {response.status_text}".strip())
    table.add_row("Error Code", _format_error_code(response.error_code))
    if response.error_text:
        table.add_row("Error", response.error_text)
    table.add_row("Body", _format_value(response.body))

    console = _get_console(force_color)
    with console.capture() as capture:
        console.print(table)

    return capture.get()


def _format_value(value: Any) -> str:
    """Format a body value for display."""
    if value is None:
        return "[dim]N/A[/dim]"
    if isinstance(value, bool):
        return "[green]Yes[/green]" if value else "[red]No[/red]"
    if isinstance(value, (dict, list)):
        return format_json(value)
    return str(value)


def _format_error_code(code: ErrorCode) -> str:
    """Format an error code with color."""
    if code is ErrorCode.NONE:
        return f"[green]{code.value}[/green]"
    if code is ErrorCode.ABORT:
        return f"[yellow]{code.value}[/yellow]"
    return f"[red]{code.value}[/red]"


def format_success(message: str) -> str:
    return f"[green]✓[/green] {message}"


def format_error(message: str) -> str:
    return f"[red]✗[/red] {message}"


def format_warning(message: str) -> str:
    return f"[yellow]⚠[/yellow] {message}"
