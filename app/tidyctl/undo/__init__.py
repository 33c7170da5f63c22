"""Reversible deletion and undo history.

This package records trash moves as delete transactions, keeps a bounded
history of them and restores them on request.
"""

from tidyctl.undo.history import DEFAULT_HISTORY_LIMIT, UndoHistory
from tidyctl.undo.manager import (
    DeleteOutcome,
    DeleteTransactionManager,
    PathFailure,
    RestoreError,
    RestoreValidationError,
)
from tidyctl.undo.models import (
    DeleteTransaction,
    TransactionState,
    TrashedPath,
    create_transaction,
)
from tidyctl.undo.store import HistoryStore, HistoryStoreError

__all__ = [
    "DEFAULT_HISTORY_LIMIT",
    "DeleteOutcome",
    "DeleteTransaction",
    "DeleteTransactionManager",
    "HistoryStore",
    "HistoryStoreError",
    "PathFailure",
    "RestoreError",
    "RestoreValidationError",
    "TransactionState",
    "TrashedPath",
    "UndoHistory",
    "create_transaction",
]
