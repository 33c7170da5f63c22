"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest
from tidyctl.search.models import FileMetadata
from tidyctl.trash.gateway import DirectoryTrash
from tidyctl.undo.history import UndoHistory
from tidyctl.undo.manager import DeleteTransactionManager


@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    """Point every XDG base directory into the test's temporary directory."""
    dirs = {
        "config": tmp_path / "xdg-config",
        "state": tmp_path / "xdg-state",
        "data": tmp_path / "xdg-data",
    }
    monkeypatch.setenv("XDG_CONFIG_HOME", str(dirs["config"]))
    monkeypatch.setenv("XDG_STATE_HOME", str(dirs["state"]))
    monkeypatch.setenv("XDG_DATA_HOME", str(dirs["data"]))
    return dirs


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create a small directory tree.

    Layout::

        x/a.txt              10 bytes
        x/sub/b.txt          20 bytes
        x/sub/c.log          5 bytes
        x/.hidden/d.txt      1 byte
        x/empty/
    """
    root = tmp_path / "x"
    (root / "sub").mkdir(parents=True)
    (root / ".hidden").mkdir()
    (root / "empty").mkdir()
    (root / "a.txt").write_bytes(b"a" * 10)
    (root / "sub" / "b.txt").write_bytes(b"b" * 20)
    (root / "sub" / "c.log").write_bytes(b"c" * 5)
    (root / ".hidden" / "d.txt").write_bytes(b"d")
    return root


@pytest.fixture
def trash(tmp_path: Path) -> DirectoryTrash:
    """Trash directory inside the test's temporary directory."""
    return DirectoryTrash(tmp_path / "trash")


@pytest.fixture
def manager(trash: DirectoryTrash) -> DeleteTransactionManager:
    """Delete manager with an in-memory history of the default size."""
    return DeleteTransactionManager(trash, UndoHistory())


@pytest.fixture
def make_metadata() -> Callable[..., FileMetadata]:
    """Factory for FileMetadata with sensible defaults."""

    def _make(name: str = "report.txt", **overrides: Any) -> FileMetadata:
        fields: dict[str, Any] = {
            "path": f"/data/{name}",
            "name": name,
            "extension": name.rsplit(".", 1)[1] if "." in name.lstrip(".") else "",
            "size": 100,
            "created": datetime(2025, 1, 10, tzinfo=UTC),
            "modified": datetime(2025, 3, 1, tzinfo=UTC),
        }
        fields.update(overrides)
        return FileMetadata(**fields)

    return _make
