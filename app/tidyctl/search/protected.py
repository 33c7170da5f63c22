"""Reserved system folders skipped by searches.

When a search excludes system folders, any entry that is one of these
directories, or lies below one, is neither reported nor descended into.
Searches rooted at a mounted OS volume (e.g. ``/mnt/old-disk``) apply the
same names relative to the volume root.
"""

import os
from pathlib import Path

from tidyctl.core.reducer import is_descendant, normalize_path

# Absolute platform-reserved directories (Linux and macOS layouts).
SYSTEM_FOLDERS: tuple[str, ...] = (
    # Pseudo filesystems
    "/proc",
    "/sys",
    "/dev",
    "/run",
    # Binaries and libraries
    "/bin",
    "/sbin",
    "/lib",
    "/lib32",
    "/lib64",
    "/usr",
    "/boot",
    "/etc",
    # macOS
    "/System",
    "/private",
    "/cores",
)

# Directories whose presence marks a directory as the root of an OS volume.
_ROOT_MARKERS: tuple[tuple[str, ...], ...] = (
    ("usr", "etc", "bin"),
    ("System", "Users", "Library"),
)

# Where user data lives on an OS volume; walked first for faster results.
HOME_FOLDER_NAMES: tuple[str, ...] = ("home", "Users")


def looks_like_system_root(path: str) -> bool:
    """Check whether a directory has the layout of an OS volume root.

    Args:
        path: Directory to inspect.

    Returns:
        True if every marker directory of one known layout exists.
    """
    root = Path(path)
    for markers in _ROOT_MARKERS:
        if all((root / name).is_dir() for name in markers):
            return True
    return False


def is_system_path(
    path: str,
    *,
    root: str | None = None,
    folders: tuple[str, ...] = SYSTEM_FOLDERS,
) -> bool:
    """Check if a path is, or lies inside, a reserved system folder.

    Args:
        path: Absolute path of the entry.
        root: Search root. When given, reserved folder names are also
            matched against the first component below the root; callers
            pass it only for roots that look like an OS volume.
        folders: Absolute reserved directories.

    Returns:
        True if the path must be skipped.
    """
    normalized = normalize_path(path)

    for folder in folders:
        if normalized == folder or is_descendant(normalized, folder):
            return True

    if root is None:
        return False

    root = normalize_path(root)
    if not is_descendant(normalized, root):
        return False

    relative = os.path.relpath(normalized, root)
    first = relative.split(os.sep, 1)[0]
    names = {os.path.basename(folder) for folder in folders}
    return first in names
