"""Search command.

Provides the `tidyctl search` command, which walks one or more
directories, shows the entries matching the given filters and can move
them straight into the trash as one reversible transaction.
"""

import json
from typing import Annotated

import typer

from tidyctl.cli.context import load_services
from tidyctl.cli.display import print_delete_outcome
from tidyctl.cli.types import OutputFormat, parse_filters
from tidyctl.search.engine import SearchStream
from tidyctl.search.filters import (
    ExtensionFilter,
    ExtensionMode,
    InvalidFilterError,
    NameFilter,
    NameMode,
)
from tidyctl.search.models import SearchRequest, SearchResult, SearchType
from tidyctl.utils.formatting import (
    console,
    create_results_table,
    format_result_row,
    format_size,
    print_error,
    print_info,
)


def search(
    roots: Annotated[
        list[str],
        typer.Argument(help="Directories to search.", show_default=False),
    ],
    filters: Annotated[
        list[str] | None,
        typer.Option(
            "--filter",
            "-F",
            help="Filter expression, e.g. name:contains:log or size:greater_than:10MB. "
            "Repeat to combine (all must match).",
        ),
    ] = None,
    name: Annotated[
        str | None,
        typer.Option("--name", help="Shortcut for --filter name:contains:TEXT."),
    ] = None,
    ext: Annotated[
        str | None,
        typer.Option("--ext", help="Shortcut for --filter ext:includes:EXT[,EXT]."),
    ] = None,
    search_type: Annotated[
        SearchType,
        typer.Option("--type", "-t", help="Entry types to report.", case_sensitive=False),
    ] = SearchType.FILES_AND_FOLDERS,
    hidden: Annotated[
        bool,
        typer.Option("--hidden", "-a", help="Include dot-prefixed entries."),
    ] = False,
    case_sensitive: Annotated[
        bool,
        typer.Option("--case-sensitive", "-c", help="Case-sensitive name and comment matching."),
    ] = False,
    recursive: Annotated[
        bool,
        typer.Option("--recursive/--no-recursive", help="Search subfolders."),
    ] = True,
    include_system: Annotated[
        bool,
        typer.Option("--include-system", help="Also search reserved system folders."),
    ] = False,
    collapse: Annotated[
        bool,
        typer.Option(
            "--collapse/--no-collapse",
            help="Hide entries inside an already matched folder.",
        ),
    ] = True,
    sizes: Annotated[
        bool,
        typer.Option("--sizes", help="Measure folder sizes (slow on large trees)."),
    ] = False,
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", min=1, help="Stop after this many results."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
    delete: Annotated[
        str | None,
        typer.Option(
            "--delete",
            metavar="BUNDLE",
            help="Move every result into the trash as one transaction named BUNDLE.",
        ),
    ] = None,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the delete confirmation prompt."),
    ] = False,
) -> None:
    """Search directories for matching files and folders.

    Examples:
        tidyctl search ~/Downloads --ext iso,dmg
        tidyctl search ~ -F size:greater_than:1GB -t files
        tidyctl search ~/.cache --name thumbnails --delete "Thumbnail caches"
    """
    predicates = list(parse_filters(filters))
    if name:
        predicates.append(NameFilter(NameMode.CONTAINS, name))
    if ext:
        try:
            predicates.append(ExtensionFilter(ExtensionMode.INCLUDES, frozenset(ext.split(","))))
        except InvalidFilterError as e:
            raise typer.BadParameter(str(e), param_hint="--ext") from None

    try:
        request = SearchRequest(
            roots=tuple(roots),
            filters=tuple(predicates),
            include_subfolders=recursive,
            include_hidden=hidden,
            case_sensitive=case_sensitive,
            search_type=search_type,
            exclude_system_folders=not include_system,
            collapse_nested=collapse,
        )
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    services = load_services()
    results = _collect(services.engine.stream(request), limit)

    if sizes:
        results = [result.with_size() if result.is_directory else result for result in results]

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([result.to_dict() for result in results]))
    elif not results:
        print_info("No matching entries found.")
    else:
        _print_table(results, predicates_text=[p.describe() for p in predicates])

    if delete is None or not results:
        return

    if not yes:
        confirmed = typer.confirm(
            f"\nMove {len(results)} entr{'y' if len(results) == 1 else 'ies'} "
            f"to the trash as '{delete}'?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    try:
        outcome = services.manager.delete_files([r.path for r in results], delete)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    services.save_associations()
    print_delete_outcome(outcome)
    if not outcome.complete:
        raise typer.Exit(code=1)


# === Private helper functions ===


def _collect(stream: SearchStream, limit: int | None) -> list[SearchResult]:
    """Drain a search stream, stopping early at ``limit`` results."""
    results: list[SearchResult] = []
    with stream:
        with console.status("[info]Searching...[/]"):
            for result in stream.results():
                results.append(result)
                if limit is not None and len(results) >= limit:
                    break
    return results


def _print_table(results: list[SearchResult], predicates_text: list[str]) -> None:
    """Display results as a Rich table with a summary line."""
    table = create_results_table()
    for result in results:
        table.add_row(*format_result_row(result))
    console.print(table)

    known = [r.size_bytes for r in results if r.size_bytes is not None]
    summary = f"\n[dim]{len(results)} match(es), {format_size(sum(known))} total"
    if predicates_text:
        summary += f" | {'; '.join(predicates_text)}"
    console.print(summary + "[/dim]")
