"""Reversible deletion.

DeleteTransactionManager moves paths into the trash as one named
transaction, records it in the undo history and restores transactions
on request. Restores are all-or-nothing: every record is validated
before anything moves, and a move that fails midway is rolled back.
"""

import logging
import os
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from tidyctl.associations.store import AssociationStore
from tidyctl.core.reducer import component_key, normalize_path, reduce_paths
from tidyctl.trash.gateway import TrashError, TrashGateway, missing_parents, remove_empty_dirs
from tidyctl.undo.history import UndoHistory
from tidyctl.undo.models import (
    DeleteTransaction,
    TransactionState,
    TrashedPath,
    create_transaction,
)

logger = logging.getLogger(__name__)


class RestoreError(Exception):
    """Raised when a restore cannot be completed.

    Nothing is left half-restored: entries already moved back by the
    failed call are returned to the trash first.
    """


class RestoreValidationError(RestoreError):
    """Raised when records fail validation before any entry is moved.

    Attributes:
        problems: One ``(record, reason)`` pair per invalid record.
    """

    def __init__(self, problems: list[tuple[TrashedPath, str]]) -> None:
        self.problems = problems
        details = "; ".join(f"{record.original_path}: {reason}" for record, reason in problems)
        super().__init__(f"Cannot restore {len(problems)} record(s): {details}")


@dataclass(frozen=True, slots=True)
class PathFailure:
    """A path that could not be trashed.

    Attributes:
        path: Path as requested.
        error: Human-readable reason.
    """

    path: str
    error: str


@dataclass(frozen=True, slots=True)
class DeleteOutcome:
    """Result of one delete call.

    Attributes:
        requested: Number of paths after nested paths were folded into
            their ancestors.
        transaction: Transaction recording the trashed paths, or None if
            nothing was trashed.
        failures: Paths that could not be trashed.
    """

    requested: int
    transaction: DeleteTransaction | None
    failures: tuple[PathFailure, ...] = ()

    @property
    def success(self) -> bool:
        """At least one path was trashed."""
        return self.transaction is not None

    @property
    def complete(self) -> bool:
        """Every requested path was trashed."""
        return self.success and not self.failures


class DeleteTransactionManager:
    """Deletes paths reversibly and restores them.

    Delete and restore calls are serialized: only one runs at a time.

    Args:
        gateway: Trash backend performing the moves.
        history: Undo history receiving new transactions.
        associations: Optional store whose links to trashed orphans are
            dropped after a successful delete.
    """

    def __init__(
        self,
        gateway: TrashGateway,
        history: UndoHistory,
        associations: AssociationStore | None = None,
    ) -> None:
        self._gateway = gateway
        self._history = history
        self._associations = associations
        self._lock = threading.Lock()

    @property
    def history(self) -> UndoHistory:
        """Undo history the manager records into."""
        return self._history

    def delete_files(self, paths: Iterable[str], bundle_name: str) -> DeleteOutcome:
        """Move paths into the trash as one named transaction.

        Paths nested inside other requested paths are not trashed
        separately. Each remaining path is trashed independently; failures
        are collected instead of aborting the call.

        Args:
            paths: Paths to delete.
            bundle_name: Display name of the transaction.

        Returns:
            DeleteOutcome describing what was trashed and what failed.

        Raises:
            ValueError: If no paths are given or the bundle name is empty.
        """
        if not bundle_name or not bundle_name.strip():
            msg = "Bundle name cannot be empty"
            raise ValueError(msg)
        absolute = [os.path.abspath(normalize_path(p)) for p in paths]
        if not absolute:
            msg = "No paths to delete"
            raise ValueError(msg)

        targets = sorted(reduce_paths(absolute))

        with self._lock:
            records: list[TrashedPath] = []
            failures: list[PathFailure] = []
            for path in targets:
                try:
                    trash_path = self._gateway.trash(path)
                except TrashError as e:
                    logger.warning("Could not trash %s: %s", path, e)
                    failures.append(PathFailure(path=path, error=str(e)))
                    continue
                records.append(TrashedPath(original_path=path, trash_path=trash_path))

            if not records:
                logger.warning("Delete '%s' trashed nothing", bundle_name)
                return DeleteOutcome(
                    requested=len(targets),
                    transaction=None,
                    failures=tuple(failures),
                )

            transaction = create_transaction(
                bundle_name.strip(), records, privileged=self._gateway.privileged
            )
            self._history.push(transaction)

            if self._associations is not None:
                for record in records:
                    self._associations.forget_path(record.original_path)

        logger.info(
            "Trashed %d of %d path(s) as '%s' (%s)",
            transaction.file_count,
            len(targets),
            transaction.name,
            transaction.id,
        )
        return DeleteOutcome(
            requested=len(targets),
            transaction=transaction,
            failures=tuple(failures),
        )

    def restore_records(self, transactions: Iterable[DeleteTransaction]) -> None:
        """Put every entry of the given transactions back where it was.

        All records are validated first; if any is invalid nothing moves.
        Records are then restored ancestors first, so an entry trashed
        from inside a folder that was trashed later lands back inside it.
        If a move fails, the entries already restored by this call go back
        into the trash and any folders created for them are removed. On
        success the transactions are removed from the history.

        Args:
            transactions: Transactions to restore.

        Raises:
            RestoreValidationError: If any record fails validation.
            RestoreError: If a move fails after validation passed.
        """
        unique: dict[str, DeleteTransaction] = {}
        for transaction in transactions:
            unique.setdefault(transaction.id, transaction)
        if not unique:
            return

        records = [record for transaction in unique.values() for record in transaction.records]

        with self._lock:
            problems = self._validate(records)
            if problems:
                raise RestoreValidationError(problems)

            ordered = sorted(records, key=lambda record: component_key(record.original_path))
            moved: list[tuple[TrashedPath, list[str]]] = []
            for record in ordered:
                created = missing_parents(record.original_path)
                try:
                    self._gateway.restore(record.trash_path, record.original_path)
                except TrashError as e:
                    remove_empty_dirs(created)
                    self._roll_back(moved)
                    raise RestoreError(f"Failed to restore {record.original_path}: {e}") from e
                moved.append((record, created))

            self._history.remove(unique)

        logger.info(
            "Restored %d path(s) from %d transaction(s)",
            len(records),
            len(unique),
        )

    def is_record_valid(self, transaction: DeleteTransaction) -> bool:
        """Check that every trashed entry of a transaction is still present."""
        return all(self._gateway.exists(record.trash_path) for record in transaction.records)

    def transaction_state(self, transaction: DeleteTransaction) -> TransactionState:
        """Classify a transaction.

        Returns:
            RESTORED if the history no longer holds it, otherwise ACTIVE or
            INVALIDATED depending on whether its trashed entries are present.
        """
        if transaction not in self._history:
            return TransactionState.RESTORED
        if self.is_record_valid(transaction):
            return TransactionState.ACTIVE
        return TransactionState.INVALIDATED

    def prune_history(self) -> list[DeleteTransaction]:
        """Drop history entries whose trashed entries are gone.

        Returns:
            The dropped transactions.
        """
        return self._history.prune_invalid(self.is_record_valid)

    def _validate(self, records: list[TrashedPath]) -> list[tuple[TrashedPath, str]]:
        problems: list[tuple[TrashedPath, str]] = []
        destinations: set[str] = set()
        for record in records:
            if not self._gateway.exists(record.trash_path):
                problems.append((record, f"trashed entry is gone: {record.trash_path}"))
            elif os.path.lexists(record.original_path):
                problems.append((record, "original location is occupied"))
            elif record.original_path in destinations:
                problems.append((record, "restored twice in the same call"))
            destinations.add(record.original_path)
        return problems

    def _roll_back(self, moved: list[tuple[TrashedPath, list[str]]]) -> None:
        for record, created in reversed(moved):
            try:
                self._gateway.restore(record.original_path, record.trash_path)
            except TrashError as e:
                logger.error(
                    "Rollback failed, %s remains at %s: %s",
                    record.trash_path,
                    record.original_path,
                    e,
                )
                continue
            remove_empty_dirs(created)
