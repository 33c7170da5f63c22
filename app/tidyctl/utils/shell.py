"""Subprocess helpers.

Used by the privileged trash backend to run moves with elevated rights.
"""

import shutil
import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of one finished command.

    Attributes:
        stdout: Captured standard output.
        stderr: Captured standard error.
        returncode: Exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if the command exited with status 0."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
) -> CommandResult:
    """Run a command to completion and capture its output.

    Args:
        args: Program and arguments. No shell is involved.
        check: If True, raise CalledProcessError on a non-zero exit.
        timeout: Seconds to wait before giving up, None for no limit.

    Returns:
        CommandResult with stdout, stderr and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and the command fails.
        subprocess.TimeoutExpired: If the command exceeds the timeout.
        FileNotFoundError: If the program is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def run_elevated(args: list[str], *, timeout: float | None = 300.0) -> CommandResult:
    """Run a command through ``sudo``.

    Args:
        args: Program and arguments to run as root.
        timeout: Seconds to wait, including any password prompt.

    Returns:
        CommandResult of the sudo invocation.

    Raises:
        FileNotFoundError: If sudo is not installed.
        subprocess.TimeoutExpired: If the command exceeds the timeout.
    """
    return run_command(["sudo", "--", *args], timeout=timeout)


def command_exists(name: str) -> bool:
    """Check if a program is on PATH."""
    return shutil.which(name) is not None
