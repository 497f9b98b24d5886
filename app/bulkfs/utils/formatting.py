"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from bulkfs.models.outcome import EntryOutcome

BULKFS_THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "header": "#69B9A1",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "bold #f53263",
        "info": "#0ec1c8",
    }
)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=BULKFS_THEME, color_system=_detect_color_system())
err_console = Console(theme=BULKFS_THEME, stderr=True, color_system=_detect_color_system())


def echo(message: str) -> None:
    """Print a plain line to stdout without markup or highlighting.

    Safe to call from worker threads and while a progress bar is live.
    """
    console.print(message, markup=False, highlight=False, soft_wrap=True)


def format_duration(seconds: float) -> str:
    """Format a wall-clock duration for the completion line.

    Args:
        seconds: Duration in seconds.

    Returns:
        Human-readable duration, e.g. "532.10ms", "4.21s" or "2m 03.50s".
    """
    if seconds < 1:
        return f"{seconds * 1000:.2f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m {rest:05.2f}s"


def create_failures_table(failures: list[EntryOutcome], limit: int = 20) -> Table:
    """Create a Rich table listing failed entry actions.

    Args:
        failures: Failed outcomes to display.
        limit: Maximum number of rows.

    Returns:
        Rich Table with Action, Error and Path columns.
    """
    table = Table(
        title="Failed Entries",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", no_wrap=True)
    table.add_column("Error", style="warning", no_wrap=True)
    table.add_column("Path", overflow="fold")

    for outcome in failures[:limit]:
        kind = outcome.error_kind.value if outcome.error_kind else "unknown"
        table.add_row(outcome.action.value, kind, str(outcome.path))

    return table


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")

