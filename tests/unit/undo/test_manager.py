"""Unit tests for DeleteTransactionManager."""

from pathlib import Path

import pytest
from tidyctl.associations.store import AssociationStore
from tidyctl.trash.gateway import DirectoryTrash, TrashError
from tidyctl.undo.history import UndoHistory
from tidyctl.undo.manager import (
    DeleteTransactionManager,
    RestoreError,
    RestoreValidationError,
)
from tidyctl.undo.models import TransactionState


class FlakyTrash(DirectoryTrash):
    """Trash whose restores into a given file name fail."""

    def __init__(self, directory: Path, failing_name: str) -> None:
        super().__init__(directory)
        self.failing_name = failing_name

    def restore(self, trash_path: str, original_path: str) -> None:
        if Path(original_path).name == self.failing_name:
            raise TrashError("simulated failure")
        super().restore(trash_path, original_path)


class TestDeleteFiles:
    """Tests for DeleteTransactionManager.delete_files."""

    def test_single_file(self, manager: DeleteTransactionManager, sample_tree: Path) -> None:
        outcome = manager.delete_files([str(sample_tree / "a.txt")], "Test Bundle")

        assert outcome.success
        assert outcome.complete
        assert not (sample_tree / "a.txt").exists()
        [transaction] = manager.history.snapshot()
        assert transaction == outcome.transaction
        assert transaction.name == "Test Bundle"
        assert transaction.file_count == 1

    def test_nested_paths_are_folded(
        self, manager: DeleteTransactionManager, sample_tree: Path
    ) -> None:
        outcome = manager.delete_files(
            [
                str(sample_tree / "sub" / "b.txt"),
                str(sample_tree / "sub"),
                str(sample_tree / "a.txt"),
            ],
            "Nested",
        )

        assert outcome.requested == 2
        assert outcome.transaction is not None
        assert outcome.transaction.original_paths == (
            str(sample_tree / "a.txt"),
            str(sample_tree / "sub"),
        )

    def test_records_backend_privilege(
        self, manager: DeleteTransactionManager, sample_tree: Path
    ) -> None:
        outcome = manager.delete_files([str(sample_tree / "a.txt")], "Plain")

        assert outcome.transaction is not None
        assert not outcome.transaction.privileged

    def test_partial_failure(self, manager: DeleteTransactionManager, sample_tree: Path) -> None:
        missing = str(sample_tree / "missing.txt")

        outcome = manager.delete_files([str(sample_tree / "a.txt"), missing], "Partial")

        assert outcome.success
        assert not outcome.complete
        assert [f.path for f in outcome.failures] == [missing]
        assert outcome.transaction is not None
        assert outcome.transaction.file_count == 1

    def test_nothing_trashed(self, manager: DeleteTransactionManager, tmp_path: Path) -> None:
        outcome = manager.delete_files([str(tmp_path / "missing")], "Nothing")

        assert not outcome.success
        assert outcome.transaction is None
        assert len(manager.history) == 0

    def test_rejects_empty_bundle_name(
        self, manager: DeleteTransactionManager, sample_tree: Path
    ) -> None:
        with pytest.raises(ValueError, match="Bundle name"):
            manager.delete_files([str(sample_tree / "a.txt")], "  ")

        assert (sample_tree / "a.txt").exists()

    def test_rejects_no_paths(self, manager: DeleteTransactionManager) -> None:
        with pytest.raises(ValueError, match="No paths"):
            manager.delete_files([], "Empty")

    def test_forgets_trashed_orphans(self, trash: DirectoryTrash, sample_tree: Path) -> None:
        associations = AssociationStore()
        associations.add_association("/opt/Foo", str(sample_tree / "sub" / "b.txt"))
        associations.add_association("/opt/Foo", str(sample_tree / "a.txt"))
        manager = DeleteTransactionManager(trash, UndoHistory(), associations)

        manager.delete_files([str(sample_tree / "sub")], "Orphans")

        assert associations.get_associated_files("/opt/Foo") == {str(sample_tree / "a.txt")}


class TestRestoreRecords:
    """Tests for DeleteTransactionManager.restore_records."""

    def test_round_trip(self, manager: DeleteTransactionManager, sample_tree: Path) -> None:
        outcome = manager.delete_files(
            [str(sample_tree / "a.txt"), str(sample_tree / "sub")], "Round trip"
        )
        assert outcome.transaction is not None

        manager.restore_records([outcome.transaction])

        assert (sample_tree / "a.txt").read_bytes() == b"a" * 10
        assert (sample_tree / "sub" / "b.txt").read_bytes() == b"b" * 20
        assert len(manager.history) == 0
        assert manager.transaction_state(outcome.transaction) == TransactionState.RESTORED

    def test_nested_transactions_restore_in_history_order(
        self, manager: DeleteTransactionManager, sample_tree: Path
    ) -> None:
        manager.delete_files([str(sample_tree / "sub" / "b.txt")], "Inner")
        manager.delete_files([str(sample_tree / "sub")], "Outer")

        manager.restore_records(manager.history.snapshot())

        assert (sample_tree / "sub" / "b.txt").read_bytes() == b"b" * 20
        assert (sample_tree / "sub" / "c.log").read_bytes() == b"c" * 5
        assert len(manager.history) == 0

    def test_rollback_removes_folders_created_for_restored_entries(
        self, tmp_path: Path, sample_tree: Path
    ) -> None:
        (sample_tree / "zz.txt").write_text("z")
        manager = DeleteTransactionManager(
            FlakyTrash(tmp_path / "trash", failing_name="zz.txt"), UndoHistory()
        )
        inner = manager.delete_files([str(sample_tree / "sub" / "b.txt")], "Inner").transaction
        outer = manager.delete_files([str(sample_tree / "sub")], "Outer").transaction
        flaky = manager.delete_files([str(sample_tree / "zz.txt")], "Flaky").transaction
        assert inner is not None and outer is not None and flaky is not None

        with pytest.raises(RestoreError, match="simulated failure"):
            manager.restore_records([inner, flaky])

        assert not (sample_tree / "sub").exists()
        assert manager.is_record_valid(inner)

        manager.restore_records([outer])

        assert (sample_tree / "sub" / "c.log").exists()

    def test_empty_input_is_noop(self, manager: DeleteTransactionManager) -> None:
        manager.restore_records([])

    def test_duplicate_transactions_restore_once(
        self, manager: DeleteTransactionManager, sample_tree: Path
    ) -> None:
        outcome = manager.delete_files([str(sample_tree / "a.txt")], "Twice")
        assert outcome.transaction is not None

        manager.restore_records([outcome.transaction, outcome.transaction])

        assert (sample_tree / "a.txt").exists()

    def test_missing_trash_entry_blocks_everything(
        self, manager: DeleteTransactionManager, sample_tree: Path, trash: DirectoryTrash
    ) -> None:
        outcome = manager.delete_files(
            [str(sample_tree / "a.txt"), str(sample_tree / "empty")], "Broken"
        )
        assert outcome.transaction is not None
        (trash.files_dir / "a.txt").unlink()

        with pytest.raises(RestoreValidationError) as exc_info:
            manager.restore_records([outcome.transaction])

        [(record, reason)] = exc_info.value.problems
        assert record.original_path == str(sample_tree / "a.txt")
        assert "gone" in reason
        assert not (sample_tree / "empty").exists()
        assert outcome.transaction in manager.history

    def test_occupied_original_blocks_restore(
        self, manager: DeleteTransactionManager, sample_tree: Path
    ) -> None:
        outcome = manager.delete_files([str(sample_tree / "a.txt")], "Occupied")
        assert outcome.transaction is not None
        (sample_tree / "a.txt").write_text("replacement")

        with pytest.raises(RestoreValidationError, match="occupied"):
            manager.restore_records([outcome.transaction])

        assert (sample_tree / "a.txt").read_text() == "replacement"

    def test_same_destination_twice_blocks_restore(
        self, manager: DeleteTransactionManager, sample_tree: Path
    ) -> None:
        path = sample_tree / "a.txt"
        first = manager.delete_files([str(path)], "First")
        path.write_text("second version")
        second = manager.delete_files([str(path)], "Second")
        assert first.transaction is not None
        assert second.transaction is not None

        with pytest.raises(RestoreValidationError, match="restored twice"):
            manager.restore_records([first.transaction, second.transaction])

        assert not path.exists()

    def test_failed_move_rolls_back(self, tmp_path: Path, sample_tree: Path) -> None:
        manager = DeleteTransactionManager(
            FlakyTrash(tmp_path / "trash", failing_name="a.txt"), UndoHistory()
        )
        outcome = manager.delete_files(
            [str(sample_tree / "a.txt"), str(sample_tree / "sub" / "b.txt")], "Flaky"
        )
        assert outcome.transaction is not None

        with pytest.raises(RestoreError, match="simulated failure"):
            manager.restore_records([outcome.transaction])

        assert not (sample_tree / "sub" / "b.txt").exists()
        assert not (sample_tree / "a.txt").exists()
        assert manager.is_record_valid(outcome.transaction)
        assert outcome.transaction in manager.history


class TestTransactionState:
    """Tests for transaction state and history pruning."""

    def test_active_then_invalidated(
        self, manager: DeleteTransactionManager, sample_tree: Path, trash: DirectoryTrash
    ) -> None:
        outcome = manager.delete_files([str(sample_tree / "a.txt")], "State")
        assert outcome.transaction is not None
        assert manager.transaction_state(outcome.transaction) == TransactionState.ACTIVE

        (trash.files_dir / "a.txt").unlink()

        assert not manager.is_record_valid(outcome.transaction)
        assert manager.transaction_state(outcome.transaction) == TransactionState.INVALIDATED

    def test_prune_history_drops_invalid(
        self, manager: DeleteTransactionManager, sample_tree: Path, trash: DirectoryTrash
    ) -> None:
        kept = manager.delete_files([str(sample_tree / "sub")], "Kept").transaction
        gone = manager.delete_files([str(sample_tree / "a.txt")], "Gone").transaction
        (trash.files_dir / "a.txt").unlink()

        assert manager.prune_history() == [gone]
        assert manager.history.snapshot() == [kept]
