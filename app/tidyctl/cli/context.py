"""Service construction for CLI commands.

Every command works on one explicitly built set of services: the search
engine, the undo history, the association store and the delete manager,
all configured from the user's settings.
"""

import logging
from dataclasses import dataclass

import typer

from tidyctl.associations.store import (
    AssociationError,
    AssociationStore,
    load_associations,
    save_associations,
)
from tidyctl.core.config import ConfigError, Settings, load_settings
from tidyctl.search.engine import SearchEngine
from tidyctl.trash.gateway import DirectoryTrash, PrivilegedTrash, TrashGateway
from tidyctl.undo.history import UndoHistory
from tidyctl.undo.manager import DeleteTransactionManager
from tidyctl.undo.store import HistoryStore
from tidyctl.utils.formatting import print_error, print_warning

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Services shared by the commands of one invocation."""

    settings: Settings
    engine: SearchEngine
    gateway: TrashGateway
    history: UndoHistory
    associations: AssociationStore
    manager: DeleteTransactionManager

    def save_associations(self) -> None:
        """Persist the association store, warning on failure."""
        try:
            save_associations(self.associations)
        except AssociationError as e:
            print_warning(f"Could not save associations: {e}")


def build_services(settings: Settings, *, privileged: bool = False) -> Services:
    """Construct all services from settings.

    Args:
        settings: Validated settings.
        privileged: Move entries into the trash through sudo.

    Returns:
        Ready-to-use Services.

    Raises:
        AssociationError: If the association file is unreadable.
    """
    engine = SearchEngine(
        batch_size=settings.search.batch_size,
        max_workers=settings.search.max_workers,
        queue_size=settings.search.queue_size,
        system_folders=settings.search.system_folders,
    )

    trash_dir = settings.trash.effective_directory
    gateway: TrashGateway = PrivilegedTrash(trash_dir) if privileged else DirectoryTrash(trash_dir)

    store = HistoryStore() if settings.history.persist else None
    history = UndoHistory(limit=settings.history.limit, store=store)
    associations = load_associations()
    manager = DeleteTransactionManager(gateway, history, associations)

    logger.debug("Services ready (trash=%s, privileged=%s)", trash_dir, privileged)
    return Services(
        settings=settings,
        engine=engine,
        gateway=gateway,
        history=history,
        associations=associations,
        manager=manager,
    )


def load_services(*, privileged: bool = False) -> Services:
    """Load settings and build services, exiting on configuration errors.

    Raises:
        typer.Exit: If the settings or association files are invalid.
    """
    try:
        settings = load_settings()
        return build_services(settings, privileged=privileged)
    except (ConfigError, AssociationError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
