"""History command for viewing past delete transactions.

This module provides the `tidyctl history` command.
"""

import json
from typing import Annotated

import typer

from tidyctl.cli.context import load_services
from tidyctl.cli.display import create_records_table
from tidyctl.cli.types import OutputFormat
from tidyctl.undo.manager import DeleteTransactionManager
from tidyctl.undo.models import DeleteTransaction
from tidyctl.utils.formatting import (
    console,
    create_history_table,
    format_history_row,
    print_error,
    print_info,
    print_success,
)


def history(
    transaction_id: Annotated[
        str | None,
        typer.Argument(help="Show the paths of one transaction (ID or prefix)."),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", min=1, help="Maximum number of entries to show."),
    ] = None,
    prune: Annotated[
        bool,
        typer.Option("--prune", help="Drop entries whose trashed files are gone."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Show delete transactions that can be restored, newest first.

    Examples:
        tidyctl history             # All entries
        tidyctl history 3f2a9c      # Paths of one transaction
        tidyctl history --prune     # Forget entries emptied from the trash
        tidyctl history -f json     # JSON output for scripting
    """
    services = load_services()
    manager = services.manager

    if prune:
        dropped = manager.prune_history()
        if dropped:
            noun = "entry" if len(dropped) == 1 else "entries"
            print_success(f"Dropped {len(dropped)} stale {noun}.")
        else:
            print_info("No stale entries.")

    if transaction_id is not None:
        transaction = services.history.get(transaction_id)
        if transaction is None:
            print_error(f"No unique transaction matches '{transaction_id}'.")
            raise typer.Exit(code=1)
        _print_details(transaction, output_format)
        return

    entries = services.history.snapshot()
    if limit is not None:
        entries = entries[:limit]

    if output_format == OutputFormat.JSON:
        _print_json(entries, manager)
        return

    if not entries:
        print_info("No delete history.")
        return
    _print_table(entries, manager)


def _print_table(entries: list[DeleteTransaction], manager: DeleteTransactionManager) -> None:
    """Print transactions as a Rich table."""
    table = create_history_table()
    for entry in entries:
        table.add_row(*format_history_row(entry, manager.transaction_state(entry)))
    console.print(table)


def _print_json(entries: list[DeleteTransaction], manager: DeleteTransactionManager) -> None:
    """Print transactions as JSON, including their current state."""
    output = [
        {**entry.to_dict(), "state": manager.transaction_state(entry).value} for entry in entries
    ]
    console.print_json(json.dumps(output))


def _print_details(transaction: DeleteTransaction, output_format: OutputFormat) -> None:
    if output_format == OutputFormat.JSON:
        console.print_json(transaction.to_json())
    else:
        console.print(create_records_table(transaction))
