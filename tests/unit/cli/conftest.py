"""Fixtures for CLI command tests."""

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_cli(isolated_dirs: dict[str, Path]) -> dict[str, Path]:
    """Keep settings, history, associations and trash inside tmp_path."""
    return isolated_dirs
