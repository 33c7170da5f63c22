"""Delete command.

Provides the `tidyctl delete` command, which moves paths into the trash
as one named, restorable transaction.
"""

from pathlib import Path
from typing import Annotated

import typer

from tidyctl.cli.context import load_services
from tidyctl.cli.display import print_delete_outcome
from tidyctl.cli.types import collect_paths
from tidyctl.utils.formatting import console, print_error, print_info


def delete(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Paths to move into the trash.", show_default=False),
    ] = None,
    name: Annotated[
        str,
        typer.Option("--name", "-n", help="Name of the transaction shown in history."),
    ] = "Manual delete",
    paths_from: Annotated[
        Path | None,
        typer.Option(
            "--paths-from",
            help="Read additional paths from a file, one per line ('-' for stdin).",
        ),
    ] = None,
    privileged: Annotated[
        bool,
        typer.Option("--sudo", help="Move entries with sudo (for paths you do not own)."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Move files and folders into the trash as one undoable transaction.

    Paths inside another given folder are trashed together with that folder.

    Examples:
        tidyctl delete ~/old-project ~/notes.bak -n "Spring cleaning"
        tidyctl delete --paths-from leftovers.txt -n "Foo leftovers"
        tidyctl delete /etc/foo.conf --sudo
    """
    targets = collect_paths(paths, paths_from)
    if not targets:
        print_error("No paths given.")
        raise typer.Exit(code=1)

    if not yes:
        console.print(f"\n[bold]Move {len(targets)} path(s) to the trash as '{name}':[/bold]")
        for target in targets[:10]:
            console.print(f"  - {target}")
        if len(targets) > 10:
            console.print(f"  ... and {len(targets) - 10} more")
        if not typer.confirm("\nProceed?", default=False):
            print_info("Aborted.")
            raise typer.Exit(code=0)

    services = load_services(privileged=privileged)
    try:
        outcome = services.manager.delete_files(targets, name)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    services.save_associations()
    print_delete_outcome(outcome)
    if not outcome.complete:
        raise typer.Exit(code=1)
