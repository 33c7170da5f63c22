"""CLI commands for tidyctl.

This package contains all subcommand implementations.
"""

from tidyctl.cli.commands import assoc, config, delete, history, restore, search

__all__ = ["assoc", "config", "delete", "history", "restore", "search"]
