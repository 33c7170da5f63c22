"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from tidyctl import __version__
from tidyctl.cli.commands import assoc, config, delete, history, restore, search
from tidyctl.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="tidyctl",
    help="Find files and folders, and delete them reversibly.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"tidyctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route tidyctl log records to stderr through Rich.

    Only the ``tidyctl`` logger is touched. Calling this again replaces
    the handler installed by a previous call.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    package_logger = logging.getLogger("tidyctl")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)

    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=verbose)
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """tidyctl - Find files and folders, and delete them reversibly.

    Everything deleted goes to the trash as a named transaction that
    can be restored later.
    """
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# Register commands
app.command("search")(search.search)
app.command("delete")(delete.delete)
app.command("history")(history.history)
app.command("restore")(restore.restore)
app.add_typer(assoc.app, name="assoc")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
