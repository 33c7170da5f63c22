"""Trash backends used by the delete manager."""

from tidyctl.trash.gateway import DirectoryTrash, PrivilegedTrash, TrashError, TrashGateway

__all__ = ["DirectoryTrash", "PrivilegedTrash", "TrashError", "TrashGateway"]
