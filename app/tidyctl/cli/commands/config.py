"""Settings commands.

Provides `tidyctl config show|path|init` for inspecting and creating the
settings file.
"""

from typing import Annotated

import tomli_w
import typer

from tidyctl.core.config import (
    ConfigError,
    Settings,
    load_settings,
    save_settings,
    settings_to_dict,
)
from tidyctl.core.paths import get_config_path
from tidyctl.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Inspect and create the settings file.",
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Print the effective settings as TOML."""
    try:
        settings = load_settings()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None

    console.print(tomli_w.dumps(settings_to_dict(settings)), markup=False, highlight=False)
    console.print(f"[dim]trash directory: {settings.trash.effective_directory}[/dim]")


@app.command()
def path() -> None:
    """Print the settings file location."""
    typer.echo(str(get_config_path()))


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with the default values."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_info(f"Settings file already exists: {config_path} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        saved = save_settings(Settings(), config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    print_success(f"Wrote default settings to {saved}")
