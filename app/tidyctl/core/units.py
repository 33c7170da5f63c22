"""Byte size parsing and formatting."""

import re

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMGT]?)(?:i?B)?\s*$", re.IGNORECASE)
_MULTIPLIERS = {"": 1, "K": 1024, "M": 1024**2, "G": 1024**3, "T": 1024**4}


def parse_size(text: str) -> int:
    """Parse a size such as ``512``, ``10KB``, ``1.5M`` or ``2GiB`` into bytes.

    Units are binary (1 KB = 1024 bytes).

    Raises:
        ValueError: If the text is not a size.
    """
    match = _SIZE_PATTERN.match(text)
    if match is None:
        msg = f"Invalid size: '{text}'"
        raise ValueError(msg)
    return int(float(match.group(1)) * _MULTIPLIERS[match.group(2).upper()])


def format_size(size_bytes: int | None) -> str:
    """Format a byte count for display.

    Args:
        size_bytes: Size in bytes, None if unknown.

    Returns:
        Human-readable size such as ``"1.5 MB"``, or ``"-"`` if unknown.
    """
    if size_bytes is None:
        return "-"
    value = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{int(value)} B" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"
