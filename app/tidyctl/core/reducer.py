"""Path-set reduction.

Collapses a set of filesystem paths to its top-level roots by dropping
every path that lives underneath another path of the same set. Both the
search engine (overlapping roots, nested matches) and the delete manager
(nested selections inside one transaction) rely on it.

The functions here are pure string operations: nothing touches the disk.
"""

import os
from collections.abc import Iterable


def normalize_path(path: str) -> str:
    """Normalize a path for comparison.

    Collapses duplicate separators, ``.`` and ``..`` components and strips
    trailing separators. Symlinks are not resolved.

    Args:
        path: Filesystem path (absolute or relative).

    Returns:
        Normalized path string.

    Raises:
        ValueError: If the path is empty.
    """
    if not path:
        msg = "Path cannot be empty"
        raise ValueError(msg)
    return os.path.normpath(path)


def is_descendant(path: str, ancestor: str) -> bool:
    """Check whether ``path`` lies strictly below ``ancestor``.

    Comparison is component-wise, so ``/a/bc`` is not a descendant of
    ``/a/b``. A path is never its own descendant.

    Args:
        path: Candidate descendant path.
        ancestor: Candidate ancestor path.

    Returns:
        True if ``path`` is inside ``ancestor``.
    """
    path = normalize_path(path)
    ancestor = normalize_path(ancestor)
    if path == ancestor:
        return False
    prefix = ancestor if ancestor.endswith(os.sep) else ancestor + os.sep
    return path.startswith(prefix)


def component_key(path: str) -> tuple[str, ...]:
    """Sort key placing every ancestor directly ahead of its descendants.

    Plain string sorting would put ``/a/b-c`` between ``/a/b`` and ``/a/b/c``.
    """
    return tuple(normalize_path(path).split(os.sep))


def reduce_paths(paths: Iterable[str]) -> frozenset[str]:
    """Drop every path that is a descendant of another path in the set.

    Paths are normalized, sorted component-wise and kept greedily: a path
    survives only if no previously kept path is its ancestor. The result
    is independent of input order, and ``reduce_paths(reduce_paths(p)) ==
    reduce_paths(p)``.

    Args:
        paths: Filesystem paths to reduce.

    Returns:
        Frozen set of top-level paths.

    Raises:
        ValueError: If any path is empty.
    """
    ordered = sorted({normalize_path(p) for p in paths}, key=component_key)

    kept: list[str] = []
    for path in ordered:
        # Because of the component-wise ordering, the only kept path that can
        # be an ancestor of ``path`` is the most recent one on the same branch.
        if kept and (path == kept[-1] or is_descendant(path, kept[-1])):
            continue
        kept.append(path)

    return frozenset(kept)
