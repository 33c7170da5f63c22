"""Links between owner paths and orphan paths.

An owner (typically an application bundle or install directory) can be
linked to any number of orphan paths it left behind, and an orphan can
be linked to several owners. Nothing here checks the disk.

Links persist as TOML::

    [[association]]
    owner = "/opt/Foo"
    orphans = ["/home/me/.cache/foo", "/home/me/.config/foo"]
"""

import logging
import os
import threading
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import tomli_w

from tidyctl.core.paths import get_associations_path
from tidyctl.core.reducer import is_descendant, normalize_path

logger = logging.getLogger(__name__)


def _absolute(path: str) -> str:
    return os.path.abspath(normalize_path(path))


class AssociationError(Exception):
    """Raised when associations cannot be loaded or saved."""


class AssociationStore:
    """Thread-safe many-to-many relation between owners and orphan paths.

    All mutations are idempotent. Paths are normalized and made absolute
    against the current directory before use.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._links: dict[str, set[str]] = {}

    def add_association(self, owner: str, orphan: str) -> None:
        """Link an orphan path to an owner."""
        owner, orphan = _absolute(owner), _absolute(orphan)
        with self._lock:
            self._links.setdefault(owner, set()).add(orphan)

    def remove_association(self, owner: str, orphan: str) -> None:
        """Unlink an orphan path from an owner."""
        owner, orphan = _absolute(owner), _absolute(orphan)
        with self._lock:
            orphans = self._links.get(owner)
            if orphans is None:
                return
            orphans.discard(orphan)
            if not orphans:
                del self._links[owner]

    def get_associated_files(self, owner: str) -> frozenset[str]:
        """Get every orphan path linked to an owner."""
        owner = _absolute(owner)
        with self._lock:
            return frozenset(self._links.get(owner, ()))

    def is_path_associated(self, path: str) -> bool:
        """Check whether a path is linked to any owner as an orphan."""
        path = _absolute(path)
        with self._lock:
            return any(path in orphans for orphans in self._links.values())

    def clear_associations(self, owner: str) -> None:
        """Remove every link of an owner."""
        owner = _absolute(owner)
        with self._lock:
            self._links.pop(owner, None)

    def owners_of(self, path: str) -> frozenset[str]:
        """Get every owner a path is linked to as an orphan."""
        path = _absolute(path)
        with self._lock:
            return frozenset(owner for owner, orphans in self._links.items() if path in orphans)

    def owners(self) -> list[str]:
        """Get every owner with at least one link, sorted."""
        with self._lock:
            return sorted(self._links)

    def forget_path(self, path: str) -> int:
        """Drop a path, and any path below it, as an orphan of every owner.

        Used after the path has been deleted.

        Returns:
            Number of links removed.
        """
        path = _absolute(path)
        removed = 0
        with self._lock:
            for owner in list(self._links):
                orphans = self._links[owner]
                gone = {o for o in orphans if o == path or is_descendant(o, path)}
                if gone:
                    orphans -= gone
                    removed += len(gone)
                    if not orphans:
                        del self._links[owner]
        return removed

    def snapshot(self) -> dict[str, frozenset[str]]:
        """Get a copy of all links keyed by owner."""
        with self._lock:
            return {owner: frozenset(orphans) for owner, orphans in self._links.items()}

    def __len__(self) -> int:
        with self._lock:
            return sum(len(orphans) for orphans in self._links.values())


def load_associations(path: Path | None = None) -> AssociationStore:
    """Load associations from a TOML file.

    A missing file yields an empty store.

    Args:
        path: Associations file. If None, uses the default state path.

    Returns:
        Populated AssociationStore.

    Raises:
        AssociationError: If the file cannot be read or parsed.
    """
    store = AssociationStore()
    file_path = path or get_associations_path()
    if not file_path.exists():
        return store

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise AssociationError(f"Invalid TOML syntax in {file_path}: {e}") from e
    except OSError as e:
        raise AssociationError(f"Failed to read associations: {e}") from e

    entries: Any = data.get("association", [])
    if not isinstance(entries, list):
        raise AssociationError(f"Invalid 'association' table in {file_path}")

    for entry in entries:
        owner = entry.get("owner") if isinstance(entry, dict) else None
        orphans = entry.get("orphans", []) if isinstance(entry, dict) else None
        if not isinstance(owner, str) or not owner or not isinstance(orphans, list):
            logger.warning("Skipping malformed association entry in %s: %r", file_path, entry)
            continue
        for orphan in orphans:
            if isinstance(orphan, str) and orphan:
                store.add_association(owner, orphan)

    return store


def save_associations(store: AssociationStore, path: Path | None = None) -> Path:
    """Save associations to a TOML file atomically.

    Args:
        store: Associations to save.
        path: Destination. If None, uses the default state path.

    Returns:
        Path where the associations were saved.

    Raises:
        AssociationError: If the file cannot be written.
    """
    file_path = path or get_associations_path()

    data = {
        "association": [
            {"owner": owner, "orphans": sorted(orphans)}
            for owner, orphans in sorted(store.snapshot().items())
        ]
    }

    tmp_path: Path | None = None
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=file_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(file_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise AssociationError(f"Failed to write associations: {e}") from e

    return file_path
