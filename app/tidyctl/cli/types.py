"""Shared types and helpers for CLI commands."""

from enum import Enum
from pathlib import Path

import typer

from tidyctl.search.filters import FilterPredicate, InvalidFilterError, parse_filter


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def parse_filters(expressions: list[str] | None) -> tuple[FilterPredicate, ...]:
    """Build predicates from ``--filter`` expressions.

    Args:
        expressions: Expressions such as ``name:contains:report``.

    Returns:
        Predicates in the order given.

    Raises:
        typer.BadParameter: If an expression is malformed.
    """
    predicates: list[FilterPredicate] = []
    for expression in expressions or []:
        try:
            predicates.append(parse_filter(expression))
        except InvalidFilterError as e:
            raise typer.BadParameter(str(e), param_hint="--filter") from None
    return tuple(predicates)


def collect_paths(paths: list[str] | None, paths_from: Path | None) -> list[str]:
    """Merge paths given as arguments with paths listed in a file.

    The file holds one path per line; blank lines and ``#`` comments are
    ignored. ``-`` reads from standard input.

    Raises:
        typer.BadParameter: If the file cannot be read.
    """
    collected = list(paths or [])
    if paths_from is None:
        return collected

    try:
        if str(paths_from) == "-":
            text = typer.get_text_stream("stdin").read()
        else:
            text = paths_from.read_text(encoding="utf-8")
    except OSError as e:
        raise typer.BadParameter(f"Cannot read {paths_from}: {e}", param_hint="--paths-from") from e

    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            collected.append(line)
    return collected
