"""Trash backends.

A TrashGateway moves paths into a trash and back out again. The delete
manager only relies on the gateway contract; which backend is used is
the caller's choice.

Both shipped backends use the freedesktop.org trash layout::

    <trash>/files/<name>             trashed entry
    <trash>/info/<name>.trashinfo    original location and deletion date
"""

import logging
import os
import shutil
import subprocess
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from urllib.parse import quote, unquote

from tidyctl.core.paths import get_default_trash_dir
from tidyctl.core.reducer import is_descendant, normalize_path
from tidyctl.utils.shell import run_elevated

logger = logging.getLogger(__name__)

TRASHINFO_SUFFIX = ".trashinfo"


class TrashError(Exception):
    """Raised when a path cannot be moved into or out of the trash."""


def missing_parents(path: str) -> list[str]:
    """List the ancestors of a path that do not exist yet, deepest first."""
    missing: list[str] = []
    parent = os.path.dirname(normalize_path(os.path.abspath(path)))
    while not os.path.lexists(parent):
        missing.append(parent)
        grandparent = os.path.dirname(parent)
        if grandparent == parent:
            break
        parent = grandparent
    return missing


def remove_empty_dirs(paths: list[str]) -> None:
    """Remove directories in order, leaving any that are not empty."""
    for path in paths:
        try:
            os.rmdir(path)
        except OSError as e:
            logger.debug("Left %s in place: %s", path, e)


class TrashGateway(ABC):
    """Capability interface for moving paths into and out of a trash.

    Example:
        >>> gateway = DirectoryTrash()
        >>> trashed = gateway.trash("/home/me/old-notes.txt")
        >>> gateway.restore(trashed, "/home/me/old-notes.txt")
    """

    # Entries moved by this backend need elevated rights to move back.
    privileged = False

    @abstractmethod
    def trash(self, path: str) -> str:
        """Move a path into the trash.

        Args:
            path: Absolute path of the entry to trash.

        Returns:
            Absolute trash-resident path of the entry.

        Raises:
            TrashError: If the entry cannot be trashed.
        """

    @abstractmethod
    def restore(self, trash_path: str, original_path: str) -> None:
        """Move a trash-resident entry back to its original location.

        The move is symmetric: passing an original path as ``trash_path``
        and a trash-resident path as ``original_path`` puts a restored
        entry back into the trash.

        Args:
            trash_path: Current location of the entry.
            original_path: Where the entry must end up. Must not exist.

        Raises:
            TrashError: If the entry cannot be moved.
        """

    def exists(self, trash_path: str) -> bool:
        """Check whether a trash-resident path is still present.

        Dangling symbolic links count as present.
        """
        return os.path.lexists(trash_path)


class DirectoryTrash(TrashGateway):
    """Trash backed by a freedesktop.org-style trash directory.

    Args:
        directory: Trash root. Defaults to ``$XDG_DATA_HOME/Trash``.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = (directory or get_default_trash_dir()).expanduser().absolute()

    @property
    def directory(self) -> Path:
        """Trash root directory."""
        return self._directory

    @property
    def files_dir(self) -> Path:
        """Directory holding trashed entries."""
        return self._directory / "files"

    @property
    def info_dir(self) -> Path:
        """Directory holding ``.trashinfo`` records."""
        return self._directory / "info"

    def trash(self, path: str) -> str:
        source = normalize_path(os.path.abspath(path))
        if not os.path.lexists(source):
            raise TrashError(f"Path does not exist: {path}")
        root = str(self._directory)
        if source == root or is_descendant(source, root) or is_descendant(root, source):
            raise TrashError(f"Cannot trash the trash directory or its contents: {path}")

        self._ensure_layout()
        name, info_path = self._reserve_name(os.path.basename(source), source)
        destination = str(self.files_dir / name)

        try:
            self._move(source, destination)
        except TrashError:
            info_path.unlink(missing_ok=True)
            raise

        logger.debug("Trashed %s -> %s", source, destination)
        return destination

    def restore(self, trash_path: str, original_path: str) -> None:
        source = normalize_path(os.path.abspath(trash_path))
        destination = normalize_path(os.path.abspath(original_path))

        if not os.path.lexists(source):
            raise TrashError(f"Trashed entry no longer exists: {trash_path}")
        if os.path.lexists(destination):
            raise TrashError(f"Destination already exists: {original_path}")

        parent = os.path.dirname(destination)
        created = missing_parents(destination)
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as e:
            raise TrashError(f"Cannot create {parent}: {e}") from e

        to_trash = self._is_trash_entry(destination)
        if to_trash:
            # Moving back into the trash: the record must describe the entry.
            self._ensure_layout()
            self._write_info(self._info_path(os.path.basename(destination)), source)

        try:
            self._move(source, destination)
        except TrashError:
            if to_trash:
                self._info_path(os.path.basename(destination)).unlink(missing_ok=True)
            remove_empty_dirs(created)
            raise

        if self._is_trash_entry(source):
            self._info_path(os.path.basename(source)).unlink(missing_ok=True)
        logger.debug("Moved %s -> %s", source, destination)

    def original_location(self, trash_path: str) -> str | None:
        """Read the original location recorded for a trashed entry.

        Args:
            trash_path: Trash-resident path.

        Returns:
            Original absolute path, or None if no readable record exists.
        """
        info_path = self._info_path(os.path.basename(trash_path))
        try:
            content = info_path.read_text(encoding="utf-8")
        except OSError:
            return None
        for line in content.splitlines():
            if line.startswith("Path="):
                return unquote(line[len("Path=") :])
        return None

    def _move(self, source: str, destination: str) -> None:
        try:
            # Falls back to copy and delete across filesystems.
            shutil.move(source, destination)
        except (OSError, shutil.Error) as e:
            raise TrashError(f"Failed to move {source} to {destination}: {e}") from e

    def _ensure_layout(self) -> None:
        try:
            self.files_dir.mkdir(parents=True, exist_ok=True)
            self.info_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TrashError(f"Cannot create trash directory {self._directory}: {e}") from e

    def _is_trash_entry(self, path: str) -> bool:
        return os.path.dirname(path) == str(self.files_dir)

    def _info_path(self, name: str) -> Path:
        return self.info_dir / f"{name}{TRASHINFO_SUFFIX}"

    def _reserve_name(self, name: str, original: str) -> tuple[str, Path]:
        """Pick a free entry name and claim it by creating its info record.

        Names are made unique as ``name (2).ext``, ``name (3).ext`` and so on.
        """
        stem, suffix = os.path.splitext(name)
        if not stem:
            stem, suffix = name, ""
        counter = 1
        candidate = name
        while True:
            info_path = self._info_path(candidate)
            if not os.path.lexists(self.files_dir / candidate):
                try:
                    self._write_info(info_path, original, exclusive=True)
                    return candidate, info_path
                except FileExistsError:
                    pass
            counter += 1
            candidate = f"{stem} ({counter}){suffix}"

    def _write_info(self, info_path: Path, original: str, *, exclusive: bool = False) -> None:
        content = (
            "[Trash Info]\n"
            f"Path={quote(original)}\n"
            f"DeletionDate={datetime.now().strftime('%Y-%m-%dT%H:%M:%S')}\n"
        )
        try:
            with open(info_path, "x" if exclusive else "w", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError:
            raise
        except OSError as e:
            raise TrashError(f"Cannot write trash record {info_path}: {e}") from e


class PrivilegedTrash(DirectoryTrash):
    """Trash that moves entries with elevated rights.

    Used for entries the current user may not move (e.g. below ``/etc``).
    Only the moves run through ``sudo``; the trash records are written as
    the current user, who must own the trash directory.

    Args:
        directory: Trash root. Defaults to ``$XDG_DATA_HOME/Trash``.
    """

    privileged = True

    def _move(self, source: str, destination: str) -> None:
        try:
            result = run_elevated(["mv", "-T", "--", source, destination])
        except (OSError, subprocess.SubprocessError) as e:
            raise TrashError(f"Failed to run sudo mv for {source}: {e}") from e
        if not result.success:
            error = result.stderr.strip() or f"sudo mv exited with {result.returncode}"
            raise TrashError(f"Failed to move {source} to {destination}: {error}")
