"""Settings model and TOML I/O.

tidyctl reads its tunables from ``~/.config/tidyctl/config.toml``. Every
key is optional; a missing file simply yields the defaults.

Example file::

    [search]
    batch_size = 50
    max_workers = 4

    [history]
    limit = 10
    persist = true

    [trash]
    directory = "/home/me/.local/share/Trash"
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tidyctl.core.paths import get_config_path, get_default_trash_dir
from tidyctl.search.protected import SYSTEM_FOLDERS

logger = logging.getLogger(__name__)


class SearchSettings(BaseModel):
    """Tunables for the search engine.

    Attributes:
        batch_size: Maximum number of results per delivered batch.
        max_workers: Upper bound on concurrently walked roots.
        queue_size: Pending batches buffered before walkers block.
        system_folders: Absolute directories skipped when a search
            excludes system folders.
    """

    model_config = ConfigDict(extra="forbid")

    batch_size: Annotated[int, Field(ge=1, le=10_000)] = 50
    max_workers: Annotated[int, Field(ge=1, le=64)] = 4
    queue_size: Annotated[int, Field(ge=1, le=10_000)] = 64
    system_folders: tuple[str, ...] = SYSTEM_FOLDERS


class HistorySettings(BaseModel):
    """Tunables for the undo history.

    Attributes:
        limit: Maximum number of delete transactions kept.
        persist: Whether the history is saved to the state directory.
    """

    model_config = ConfigDict(extra="forbid")

    limit: Annotated[int, Field(ge=1, le=1000)] = 10
    persist: bool = True


class TrashSettings(BaseModel):
    """Trash location settings.

    Attributes:
        directory: Trash directory. None means the freedesktop.org
            user trash (``$XDG_DATA_HOME/Trash``).
    """

    model_config = ConfigDict(extra="forbid")

    directory: Path | None = None

    @property
    def effective_directory(self) -> Path:
        """Get the configured trash directory or the user default."""
        if self.directory is not None:
            return self.directory.expanduser()
        return get_default_trash_dir()


class Settings(BaseModel):
    """Top-level tidyctl settings."""

    model_config = ConfigDict(extra="forbid")

    search: SearchSettings = Field(default_factory=SearchSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    trash: TrashSettings = Field(default_factory=TrashSettings)


class ConfigError(Exception):
    """Base exception for settings errors."""


class ConfigParseError(ConfigError):
    """Raised when the settings file is not valid TOML."""


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Settings file. If None, uses the default config path.

    Returns:
        Validated Settings object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or fails validation.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No settings file at %s, using defaults", config_path)
        return Settings()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {config_path}: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written atomically through a temporary file and
    ``os.replace()``.

    Args:
        settings: Settings to save.
        path: Destination. If None, uses the default config path.

    Returns:
        Path where the settings were saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = settings_to_dict(settings)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write settings: {e}") from e

    return config_path


def settings_to_dict(settings: Settings) -> dict[str, Any]:
    """Convert Settings to a TOML-serializable dictionary.

    TOML has no null, so unset optional values are omitted.
    """
    data = settings.model_dump(mode="json", exclude_none=True)
    if not data.get("trash"):
        data.pop("trash", None)
    return data
