"""Association commands.

Links owner paths (an application folder, an install prefix) to the
orphan paths they leave behind, so the leftovers can be found and
deleted together later.
"""

import json
from typing import Annotated

import typer
from rich.table import Table

from tidyctl.cli.context import load_services
from tidyctl.cli.types import OutputFormat
from tidyctl.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Link owners to the orphan paths they leave behind.",
    no_args_is_help=True,
)


@app.command()
def add(
    owner: Annotated[str, typer.Argument(help="Owner path.")],
    orphans: Annotated[list[str], typer.Argument(help="Orphan paths to link.")],
) -> None:
    """Link orphan paths to an owner."""
    services = load_services()
    for orphan in orphans:
        services.associations.add_association(owner, orphan)
    services.save_associations()
    print_success(f"Linked {len(orphans)} path(s) to {owner}.")


@app.command()
def remove(
    owner: Annotated[str, typer.Argument(help="Owner path.")],
    orphans: Annotated[list[str], typer.Argument(help="Orphan paths to unlink.")],
) -> None:
    """Unlink orphan paths from an owner."""
    services = load_services()
    for orphan in orphans:
        services.associations.remove_association(owner, orphan)
    services.save_associations()
    print_success(f"Unlinked {len(orphans)} path(s) from {owner}.")


@app.command()
def clear(
    owner: Annotated[str, typer.Argument(help="Owner path.")],
) -> None:
    """Remove every link of an owner."""
    services = load_services()
    services.associations.clear_associations(owner)
    services.save_associations()
    print_success(f"Cleared associations of {owner}.")


@app.command("list")
def list_associations(
    owner: Annotated[
        str | None,
        typer.Argument(help="Only show this owner."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Show owners and their linked orphan paths."""
    services = load_services()
    store = services.associations
    owners = [owner] if owner is not None else store.owners()
    links = {o: sorted(store.get_associated_files(o)) for o in owners}
    links = {o: orphans for o, orphans in links.items() if orphans}

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(links))
        return

    if not links:
        print_info("No associations.")
        return

    table = Table(
        title="Associations",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Owner", style="package", overflow="fold")
    table.add_column("Orphan paths", style="text", overflow="fold")
    for linked_owner, orphans in links.items():
        table.add_row(linked_owner, "\n".join(orphans))
    console.print(table)


@app.command()
def check(
    path: Annotated[str, typer.Argument(help="Path to look up.")],
) -> None:
    """Tell whether a path is linked to any owner.

    Exits with status 1 when the path is not linked.
    """
    services = load_services()
    owners = sorted(services.associations.owners_of(path))
    if not owners:
        print_info(f"{path} is not associated with any owner.")
        raise typer.Exit(code=1)
    console.print(f"{path} is associated with:")
    for owner in owners:
        console.print(f"  - [package]{owner}[/]")
