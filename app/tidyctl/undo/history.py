"""Bounded, most-recent-first history of delete transactions."""

import logging
import threading
from collections.abc import Callable, Iterable, Iterator

from tidyctl.undo.models import DeleteTransaction
from tidyctl.undo.store import HistoryStore, HistoryStoreError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class UndoHistory:
    """Most-recent-first list of delete transactions with a fixed capacity.

    Pushing onto a full history evicts the oldest transaction. When a
    HistoryStore is attached, the history is loaded from it at construction
    and saved after every change.

    All methods are thread-safe.

    Args:
        limit: Maximum number of transactions kept.
        store: Optional persistence backend.
    """

    def __init__(
        self,
        limit: int = DEFAULT_HISTORY_LIMIT,
        store: HistoryStore | None = None,
    ) -> None:
        if limit < 1:
            msg = f"History limit must be at least 1, got {limit}"
            raise ValueError(msg)
        self._limit = limit
        self._store = store
        self._lock = threading.Lock()
        self._entries: list[DeleteTransaction] = []

        if store is not None:
            loaded = store.load()
            self._entries = loaded[:limit]
            if len(loaded) > limit:
                logger.debug("Dropping %d history entries over the limit", len(loaded) - limit)
                self._save()

    @property
    def limit(self) -> int:
        """Capacity of the history."""
        return self._limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[DeleteTransaction]:
        return iter(self.snapshot())

    def __contains__(self, transaction: object) -> bool:
        if not isinstance(transaction, DeleteTransaction):
            return False
        with self._lock:
            return any(entry.id == transaction.id for entry in self._entries)

    def snapshot(self) -> list[DeleteTransaction]:
        """Get a copy of the history, newest first."""
        with self._lock:
            return list(self._entries)

    def get(self, transaction_id: str) -> DeleteTransaction | None:
        """Find a transaction by ID, or by a unique ID prefix.

        Args:
            transaction_id: Full ID or unambiguous prefix.

        Returns:
            Matching transaction, or None if there is no unique match.
        """
        with self._lock:
            found = [entry for entry in self._entries if entry.id.startswith(transaction_id)]
        exact = [entry for entry in found if entry.id == transaction_id]
        if exact:
            return exact[0]
        return found[0] if len(found) == 1 else None

    def push(self, transaction: DeleteTransaction) -> DeleteTransaction | None:
        """Add a transaction as the most recent entry.

        Args:
            transaction: Transaction to add.

        Returns:
            The evicted oldest transaction if the history was full, else None.
        """
        evicted: DeleteTransaction | None = None
        with self._lock:
            self._entries.insert(0, transaction)
            if len(self._entries) > self._limit:
                evicted = self._entries.pop()
            self._save()
        if evicted is not None:
            logger.info("Undo history full, dropped '%s' (%s)", evicted.name, evicted.id)
        return evicted

    def remove(self, transaction_ids: Iterable[str]) -> list[DeleteTransaction]:
        """Remove transactions by ID.

        Unknown IDs are ignored.

        Returns:
            The removed transactions.
        """
        ids = set(transaction_ids)
        with self._lock:
            removed = [entry for entry in self._entries if entry.id in ids]
            if removed:
                self._entries = [entry for entry in self._entries if entry.id not in ids]
                self._save()
        return removed

    def prune_invalid(
        self,
        is_valid: Callable[[DeleteTransaction], bool],
    ) -> list[DeleteTransaction]:
        """Drop transactions that can no longer be restored.

        Args:
            is_valid: Predicate telling whether a transaction is still restorable.

        Returns:
            The dropped transactions.
        """
        with self._lock:
            stale = [entry for entry in self._entries if not is_valid(entry)]
            if stale:
                self._entries = [entry for entry in self._entries if entry not in stale]
                self._save()
        for entry in stale:
            logger.info("Pruned stale history entry '%s' (%s)", entry.name, entry.id)
        return stale

    def clear(self) -> None:
        """Remove every transaction."""
        with self._lock:
            self._entries = []
            self._save()

    def _save(self) -> None:
        # Caller holds the lock. The in-memory history stays authoritative
        # for this process when the file cannot be written.
        if self._store is None:
            return
        try:
            self._store.save(self._entries)
        except HistoryStoreError as e:
            logger.warning("Undo history not saved: %s", e)
