"""Search domain models.

This module defines the data structures exchanged with the search
engine: the per-entry metadata that filters are evaluated against, the
request describing one search, and the result records streamed back to
the consumer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tidyctl.search.filters import FilterPredicate


class SearchType(str, Enum):
    """Which entry types a search reports.

    Attributes:
        FILES_ONLY: Only non-directories.
        FOLDERS_ONLY: Only directories.
        FILES_AND_FOLDERS: Both.
    """

    FILES_ONLY = "files"
    FOLDERS_ONLY = "folders"
    FILES_AND_FOLDERS = "all"


class FileKind(str, Enum):
    """Closed set of entry kinds usable in a kind filter.

    Attributes:
        FILE: Regular file (or anything that is not a directory).
        FOLDER: Plain directory that is not a package.
        PACKAGE: Directory with a bundle extension (``Foo.app``).
        ALIAS: Symbolic link.
    """

    FILE = "file"
    FOLDER = "folder"
    PACKAGE = "package"
    ALIAS = "alias"


# Directory extensions treated as opaque packages.
PACKAGE_EXTENSIONS: frozenset[str] = frozenset(
    {
        "app",
        "appex",
        "xpc",
        "kext",
        "driver",
        "plugin",
        "bundle",
        "component",
        "vst",
        "vst3",
        "framework",
        "prefpane",
        "qlgenerator",
        "saver",
        "mdimporter",
        "workflow",
        "xcodeproj",
        "xcworkspace",
        "xcframework",
        "dsym",
        "pkg",
    }
)


def split_extension(name: str) -> str:
    """Get the extension of a file name without the leading dot.

    Dotfiles such as ``.bashrc`` have no extension.
    """
    _, ext = os.path.splitext(name)
    return ext[1:]


@dataclass(frozen=True, slots=True)
class FileMetadata:
    """Metadata of one filesystem entry, as seen by filters.

    Attributes:
        path: Absolute path of the entry.
        name: Base name.
        extension: Extension without the dot ("" when absent).
        is_directory: Whether the entry is a directory (symlinks excluded).
        is_symlink: Whether the entry is a symbolic link.
        is_package: Whether the entry is a package directory.
        size: Size in bytes; 0 for directories.
        created: Creation (birth) time, or inode change time where the
            platform has no birth time. None if unavailable.
        modified: Last modification time. None if unavailable.
        tags: Tag names attached to the entry.
        comment: Free-text comment, None if the entry has none.
    """

    path: str
    name: str
    extension: str = ""
    is_directory: bool = False
    is_symlink: bool = False
    is_package: bool = False
    size: int = 0
    created: datetime | None = None
    modified: datetime | None = None
    tags: tuple[str, ...] = ()
    comment: str | None = None

    def __post_init__(self) -> None:
        """Validate metadata after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size < 0:
            msg = f"Size cannot be negative, got {self.size}"
            raise ValueError(msg)

    @property
    def kind(self) -> FileKind:
        """Classify the entry into a FileKind."""
        if self.is_symlink:
            return FileKind.ALIAS
        if self.is_package:
            return FileKind.PACKAGE
        if self.is_directory:
            return FileKind.FOLDER
        return FileKind.FILE

    @property
    def type_label(self) -> str:
        """Human-readable type: "Folder", "File" or the upper-cased extension."""
        if self.is_directory:
            return "Folder"
        if not self.extension:
            return "File"
        return self.extension.upper()


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Description of one search.

    Attributes:
        roots: Directories to search.
        filters: Active predicates, all of which must match. Their order is
            kept for display only.
        include_subfolders: Walk the whole tree (False: immediate children only).
        include_hidden: Report and descend into dot-prefixed entries.
        case_sensitive: Case-sensitive name and comment matching.
        search_type: Which entry types to report.
        exclude_system_folders: Skip reserved system directories.
        collapse_nested: Do not report entries inside an already reported folder.
    """

    roots: tuple[str, ...]
    filters: tuple[FilterPredicate, ...] = ()
    include_subfolders: bool = True
    include_hidden: bool = False
    case_sensitive: bool = False
    search_type: SearchType = SearchType.FILES_AND_FOLDERS
    exclude_system_folders: bool = True
    collapse_nested: bool = True

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not self.roots:
            msg = "Search request needs at least one root"
            raise ValueError(msg)
        if any(not root for root in self.roots):
            msg = "Search roots cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True, eq=False)
class SearchResult:
    """One matching entry delivered to the consumer.

    Results are identified by path: two results with the same path are
    equal even when their metadata differs between refreshes.

    Attributes:
        path: Absolute path.
        name: Display name.
        type_label: "Folder", "File" or the upper-cased extension.
        size_bytes: Size in bytes. None for directories until measured.
        modified: Last modification time, None if unavailable.
        is_directory: Whether the entry is a directory.
        icon: Opaque icon handle supplied by the consumer, never computed here.
    """

    path: str
    name: str
    type_label: str
    size_bytes: int | None
    modified: datetime | None
    is_directory: bool
    icon: Any = field(default=None, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchResult):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    @classmethod
    def from_metadata(cls, metadata: FileMetadata) -> SearchResult:
        """Build a result from entry metadata.

        Directory sizes are left unset; see :meth:`with_size`.
        """
        return cls(
            path=metadata.path,
            name=metadata.name,
            type_label=metadata.type_label,
            size_bytes=None if metadata.is_directory else metadata.size,
            modified=metadata.modified,
            is_directory=metadata.is_directory,
        )

    def with_size(self) -> SearchResult:
        """Return a copy with the size measured from disk.

        Directory sizes are computed recursively, which is expensive; the
        consumer decides when it is worth it.
        """
        from tidyctl.search.metadata import measure_size

        return replace(self, size_bytes=measure_size(self.path))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output (icon omitted)."""
        return {
            "path": self.path,
            "name": self.name,
            "type": self.type_label,
            "size_bytes": self.size_bytes,
            "modified": self.modified.isoformat() if self.modified else None,
            "is_directory": self.is_directory,
        }
