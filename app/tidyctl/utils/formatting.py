"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from tidyctl.core.theme import get_theme
from tidyctl.core.units import format_size

if TYPE_CHECKING:
    from tidyctl.search.models import SearchResult
    from tidyctl.undo.models import DeleteTransaction, TransactionState


def _detect_color_system() -> str | None:
    """Use truecolor on interactive terminals, let Rich decide otherwise."""
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_timestamp(value: datetime | str | None) -> str:
    """Format a timestamp as local ``YYYY-MM-DD HH:MM``."""
    if value is None:
        return "-"
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def create_results_table(title: str = "Search Results", *, numbered: bool = False) -> Table:
    """Create a pre-configured table for search results.

    Args:
        title: Table title.
        numbered: Add a leading index column used for selection prompts.

    Returns:
        Rich Table with zebra striping.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    if numbered:
        table.add_column("#", style="muted", justify="right")
    table.add_column("Name", no_wrap=True)
    table.add_column("Type", style="muted")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Modified", style="muted")
    table.add_column("Path", style="text", overflow="fold")
    return table


def format_result_row(result: SearchResult) -> tuple[str, str, str, str, str]:
    """Format a search result as a table row.

    Returns:
        Tuple of (name, type, size, modified, path) with Rich markup.
    """
    style = "folder" if result.is_directory else "file"
    return (
        f"[{style}]{result.name}[/]",
        result.type_label,
        format_size(result.size_bytes),
        format_timestamp(result.modified),
        result.path,
    )


def create_history_table(title: str = "Delete History") -> Table:
    """Create a pre-configured table for delete transactions."""
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Name", style="text")
    table.add_column("Deleted", style="muted")
    table.add_column("Files", justify="right", style="info")
    table.add_column("State")
    return table


def format_history_row(
    transaction: DeleteTransaction,
    state: TransactionState,
) -> tuple[str, str, str, str, str]:
    """Format a delete transaction as a history table row."""
    return (
        transaction.id[:8],
        transaction.name,
        format_timestamp(transaction.timestamp),
        str(transaction.file_count),
        f"[state_{state.value}]{state.value}[/]",
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
