"""Reading entry metadata from disk.

Stat information comes from ``os.DirEntry`` during a walk so that each
entry costs at most one extra ``lstat``. Tags and comments are optional
extended attributes read through a MetadataProvider.
"""

import logging
import os
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from pathlib import Path

from tidyctl.search.models import PACKAGE_EXTENSIONS, FileMetadata, split_extension

logger = logging.getLogger(__name__)

# Extended attributes used by freedesktop.org file managers.
TAGS_XATTR = "user.xdg.tags"
COMMENT_XATTR = "user.xdg.comment"


class MetadataProvider(ABC):
    """Source of tags and comments for filesystem entries.

    Implementations must not raise for unreadable entries: missing
    metadata is reported as no tags and no comment.
    """

    @abstractmethod
    def tags(self, path: str) -> tuple[str, ...]:
        """Get the tags attached to an entry.

        Args:
            path: Absolute path of the entry.

        Returns:
            Tag names, empty if the entry has none.
        """

    @abstractmethod
    def comment(self, path: str) -> str | None:
        """Get the comment attached to an entry.

        Args:
            path: Absolute path of the entry.

        Returns:
            Comment text, or None if the entry has none.
        """


class NullMetadataProvider(MetadataProvider):
    """Provider for filesystems without tag support."""

    def tags(self, path: str) -> tuple[str, ...]:
        return ()

    def comment(self, path: str) -> str | None:
        return None


class XattrMetadataProvider(MetadataProvider):
    """Read tags and comments from ``user.xdg.*`` extended attributes.

    Tags are stored comma-separated. On platforms without ``os.getxattr``
    every entry reports no metadata.
    """

    def _read(self, path: str, name: str) -> str | None:
        if not hasattr(os, "getxattr"):
            return None
        try:
            raw = os.getxattr(path, name, follow_symlinks=False)
        except OSError:
            return None
        return raw.decode("utf-8", errors="replace")

    def tags(self, path: str) -> tuple[str, ...]:
        raw = self._read(path, TAGS_XATTR)
        if not raw:
            return ()
        return tuple(tag.strip() for tag in raw.split(",") if tag.strip())

    def comment(self, path: str) -> str | None:
        raw = self._read(path, COMMENT_XATTR)
        return raw or None


def _timestamp(value: float | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _build(
    path: str,
    name: str,
    st: os.stat_result | None,
    is_directory: bool,
    is_symlink: bool,
    provider: MetadataProvider | None,
) -> FileMetadata:
    extension = split_extension(name)
    is_package = is_directory and extension.casefold() in PACKAGE_EXTENSIONS

    created: datetime | None = None
    modified: datetime | None = None
    size = 0
    if st is not None:
        # Birth time where the platform records it, inode change time otherwise.
        created = _timestamp(getattr(st, "st_birthtime", None) or st.st_ctime)
        modified = _timestamp(st.st_mtime)
        if not is_directory:
            size = max(st.st_size, 0)

    tags: tuple[str, ...] = ()
    comment: str | None = None
    if provider is not None:
        tags = provider.tags(path)
        comment = provider.comment(path)

    return FileMetadata(
        path=path,
        name=name,
        extension=extension,
        is_directory=is_directory,
        is_symlink=is_symlink,
        is_package=is_package,
        size=size,
        created=created,
        modified=modified,
        tags=tags,
        comment=comment,
    )


def read_entry_metadata(
    entry: os.DirEntry[str],
    provider: MetadataProvider | None = None,
) -> FileMetadata:
    """Build metadata for a directory entry produced by ``os.scandir``.

    Symbolic links are described by the link itself: a link to a
    directory is not a directory.

    Args:
        entry: Directory entry.
        provider: Tag and comment source. None skips those lookups.

    Returns:
        Entry metadata. Stat failures yield zero size and no timestamps.
    """
    try:
        is_symlink = entry.is_symlink()
        is_directory = not is_symlink and entry.is_dir(follow_symlinks=False)
    except OSError:
        is_symlink = is_directory = False

    try:
        st: os.stat_result | None = entry.stat(follow_symlinks=False)
    except OSError as e:
        logger.debug("Cannot stat %s: %s", entry.path, e)
        st = None

    return _build(entry.path, entry.name, st, is_directory, is_symlink, provider)


def read_path_metadata(
    path: str | Path,
    provider: MetadataProvider | None = None,
) -> FileMetadata:
    """Build metadata for a single path.

    Args:
        path: Filesystem path.
        provider: Tag and comment source. None skips those lookups.

    Returns:
        Entry metadata.

    Raises:
        OSError: If the path cannot be stat'ed.
    """
    target = os.path.abspath(os.fspath(path))
    st = os.lstat(target)
    is_symlink = os.path.islink(target)
    is_directory = not is_symlink and os.path.isdir(target)
    name = os.path.basename(target) or target
    return _build(target, name, st, is_directory, is_symlink, provider)


def measure_size(path: str | Path) -> int | None:
    """Get size in bytes for a path.

    For files and links, returns the entry size. For directories, returns
    the sum of all regular files below it without following links.
    Unreadable children are skipped.

    Args:
        path: Path to measure.

    Returns:
        Size in bytes, or None if the path itself is unreadable.
    """
    target = Path(path)
    try:
        if target.is_symlink() or target.is_file():
            return target.lstat().st_size

        if target.is_dir():
            total = 0
            for dirpath, _dirnames, filenames in os.walk(target):
                for filename in filenames:
                    child = os.path.join(dirpath, filename)
                    try:
                        if not os.path.islink(child):
                            total += os.lstat(child).st_size
                    except OSError:
                        continue
            return total
    except OSError:
        return None
    return None
