"""Utility modules for tidyctl.

This module exports commonly used utility functions.
"""

from tidyctl.utils.formatting import (
    console,
    err_console,
    format_size,
    format_timestamp,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from tidyctl.utils.shell import CommandResult, command_exists, run_command, run_elevated

__all__ = [
    "CommandResult",
    "command_exists",
    "console",
    "err_console",
    "format_size",
    "format_timestamp",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "run_command",
    "run_elevated",
]
