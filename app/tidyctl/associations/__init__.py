"""Owner to orphan path associations."""

from tidyctl.associations.store import (
    AssociationError,
    AssociationStore,
    load_associations,
    save_associations,
)

__all__ = ["AssociationError", "AssociationStore", "load_associations", "save_associations"]
