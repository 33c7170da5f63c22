"""Restore command for undoing delete transactions.

This module provides the `tidyctl restore` command, which moves the
entries of one or more delete transactions back out of the trash.
"""

from typing import Annotated

import typer

from tidyctl.cli.context import load_services
from tidyctl.cli.display import create_records_table, print_restore_problems
from tidyctl.undo.history import UndoHistory
from tidyctl.undo.manager import RestoreError, RestoreValidationError
from tidyctl.undo.models import DeleteTransaction
from tidyctl.utils.formatting import console, print_error, print_info, print_success


def restore(
    transaction_ids: Annotated[
        list[str] | None,
        typer.Argument(
            help="Transactions to restore (ID or prefix). Defaults to the most recent.",
            show_default=False,
        ),
    ] = None,
    privileged: Annotated[
        bool,
        typer.Option("--sudo", help="Move entries back with sudo (for paths you do not own)."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be restored without moving anything."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Move trashed entries back to where they were deleted from.

    Either every entry of the selected transactions is restored, or none is.
    Transactions deleted with --sudo are restored with sudo automatically.

    Examples:
        tidyctl restore             # Undo the most recent delete
        tidyctl restore 3f2a9c 81b0 # Undo two specific deletes
        tidyctl restore --dry-run
        tidyctl restore 3f2a9c --sudo
    """
    services = load_services()
    transactions = _select(services.history, transaction_ids)
    if privileged or any(t.privileged for t in transactions):
        services = load_services(privileged=True)

    for transaction in transactions:
        console.print(create_records_table(transaction))

    if dry_run:
        print_info("Dry run, no changes made.")
        return

    if not yes and not typer.confirm("Restore these entries?", default=False):
        print_info("Cancelled.")
        return

    try:
        services.manager.restore_records(transactions)
    except RestoreValidationError as e:
        print_restore_problems(e)
        raise typer.Exit(code=1) from None
    except RestoreError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    count = sum(t.file_count for t in transactions)
    print_success(f"Restored {count} path(s) from {len(transactions)} transaction(s).")


def _select(history: UndoHistory, transaction_ids: list[str] | None) -> list[DeleteTransaction]:
    """Resolve the transactions named on the command line.

    Raises:
        typer.Exit: If the history is empty or an ID matches nothing.
    """
    entries = history.snapshot()
    if not entries:
        print_info("No delete history.")
        raise typer.Exit(code=0)

    if not transaction_ids:
        return [entries[0]]

    selected: list[DeleteTransaction] = []
    for transaction_id in transaction_ids:
        transaction = history.get(transaction_id)
        if transaction is None:
            print_error(f"No unique transaction matches '{transaction_id}'.")
            raise typer.Exit(code=1)
        if transaction not in selected:
            selected.append(transaction)
    return selected
