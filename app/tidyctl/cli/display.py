"""Shared Rich display functions for delete and restore results.

Provides summary printers used by the commands that move entries into
and out of the trash (search --delete, delete, restore).
"""

from rich.table import Table

from tidyctl.undo.manager import DeleteOutcome, RestoreValidationError
from tidyctl.undo.models import DeleteTransaction
from tidyctl.utils.formatting import (
    console,
    format_timestamp,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def print_delete_outcome(outcome: DeleteOutcome) -> None:
    """Summarize a delete call.

    Prints one warning per path that could not be trashed, then either the
    new transaction and how to undo it, or an error if nothing was trashed.

    Args:
        outcome: Result of DeleteTransactionManager.delete_files().
    """
    for failure in outcome.failures:
        print_warning(f"{failure.path}: {failure.error}")

    transaction = outcome.transaction
    if transaction is None:
        print_error("Nothing was moved to the trash.")
        return

    print_success(
        f"Moved {transaction.file_count} of {outcome.requested} path(s) to the trash "
        f"as '{transaction.name}' (id {transaction.id[:8]})."
    )
    print_info(f"Undo with: tidyctl restore {transaction.id[:8]}")


def create_records_table(transaction: DeleteTransaction) -> Table:
    """Create a table listing the trashed paths of a transaction.

    Args:
        transaction: Transaction to display.

    Returns:
        Rich Table with original and trash-resident paths.
    """
    table = Table(
        title=f"{transaction.name} ({format_timestamp(transaction.timestamp)})",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Original path", style="text", overflow="fold")
    table.add_column("In trash", style="muted", overflow="fold")
    for record in transaction.records:
        table.add_row(record.original_path, record.trash_path)
    return table


def print_restore_problems(error: RestoreValidationError) -> None:
    """List every record that blocked a restore."""
    print_error("Restore aborted, nothing was moved:")
    for record, reason in error.problems:
        console.print(f"  [warning]-[/] {record.original_path}: [muted]{reason}[/]")
