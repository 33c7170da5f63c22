"""XDG-compliant path management for tidyctl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, state, and trash storage.

XDG defaults:
- Config: ~/.config/tidyctl/
- State: ~/.local/state/tidyctl/
- Trash: ~/.local/share/Trash/ (shared freedesktop.org trash)
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "tidyctl"


def _get_xdg_base(env_var: str, default_subdir: str) -> Path:
    """Get an XDG base directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the XDG base directory (not application-specific).
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get the application-specific XDG directory."""
    return _get_xdg_base(env_var, default_subdir) / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/tidyctl/ (or XDG_CONFIG_HOME/tidyctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the undo history and the association file,
    which should persist between runs but are not configuration.

    Returns:
        Path to ~/.local/state/tidyctl/ (or XDG_STATE_HOME/tidyctl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    """Get the settings file path.

    Returns:
        Path to ~/.config/tidyctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_history_path() -> Path:
    """Get the undo history file path.

    Returns:
        Path to ~/.local/state/tidyctl/undo-history.json.
    """
    return get_state_dir() / "undo-history.json"


def get_associations_path() -> Path:
    """Get the owner/orphan association file path.

    Returns:
        Path to ~/.local/state/tidyctl/associations.toml.
    """
    return get_state_dir() / "associations.toml"


def get_default_trash_dir() -> Path:
    """Get the user's freedesktop.org trash directory.

    Returns:
        Path to ~/.local/share/Trash (or XDG_DATA_HOME/Trash).
    """
    return _get_xdg_base("XDG_DATA_HOME", ".local/share") / "Trash"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")
