"""Unit tests for delete transaction models."""

import json
from datetime import UTC

import pytest
from tidyctl.undo.models import (
    DeleteTransaction,
    TransactionState,
    TrashedPath,
    create_transaction,
)


def make_record(name: str = "a.txt") -> TrashedPath:
    return TrashedPath(original_path=f"/home/me/{name}", trash_path=f"/trash/files/{name}")


class TestTrashedPath:
    """Tests for TrashedPath dataclass."""

    def test_rejects_empty_original(self) -> None:
        with pytest.raises(ValueError, match="Original path"):
            TrashedPath(original_path="", trash_path="/trash/files/a")

    def test_rejects_empty_trash_path(self) -> None:
        with pytest.raises(ValueError, match="Trash path"):
            TrashedPath(original_path="/a", trash_path="")

    def test_dict_round_trip(self) -> None:
        record = make_record()
        assert TrashedPath.from_dict(record.to_dict()) == record


class TestDeleteTransaction:
    """Tests for DeleteTransaction dataclass."""

    def test_requires_records(self) -> None:
        with pytest.raises(ValueError, match="at least one record"):
            DeleteTransaction(id="abc", name="x", timestamp="2025-01-01T00:00:00+00:00", records=())

    def test_requires_name(self) -> None:
        with pytest.raises(ValueError, match="name cannot be empty"):
            DeleteTransaction(
                id="abc",
                name="",
                timestamp="2025-01-01T00:00:00+00:00",
                records=(make_record(),),
            )

    def test_derived_properties(self) -> None:
        transaction = create_transaction("Cleanup", [make_record("a"), make_record("b")])

        assert transaction.file_count == 2
        assert transaction.original_paths == ("/home/me/a", "/home/me/b")
        assert transaction.created_at.tzinfo == UTC

    def test_to_dict_includes_file_count(self) -> None:
        transaction = create_transaction("Cleanup", [make_record()])

        data = transaction.to_dict()

        assert data["file_count"] == 1
        assert data["records"] == [make_record().to_dict()]

    def test_json_round_trip(self) -> None:
        transaction = create_transaction("Cleanup", [make_record("a"), make_record("b")])

        restored = DeleteTransaction.from_json(transaction.to_json())

        assert restored == transaction

    def test_privileged_flag_round_trip(self) -> None:
        transaction = create_transaction("Cleanup", [make_record()], privileged=True)

        restored = DeleteTransaction.from_json(transaction.to_json())

        assert restored.privileged

    def test_entries_without_privileged_flag_load(self) -> None:
        data = create_transaction("Cleanup", [make_record()]).to_dict()
        del data["privileged"]

        assert not DeleteTransaction.from_dict(data).privileged

    def test_from_json_rejects_missing_fields(self) -> None:
        with pytest.raises(KeyError):
            DeleteTransaction.from_json(json.dumps({"id": "abc", "name": "x"}))


class TestCreateTransaction:
    """Tests for create_transaction function."""

    def test_unique_ids(self) -> None:
        first = create_transaction("A", [make_record()])
        second = create_transaction("A", [make_record()])

        assert first.id != second.id
        assert len(first.id) == 12

    def test_rejects_empty_records(self) -> None:
        with pytest.raises(ValueError, match="no records"):
            create_transaction("A", [])


class TestTransactionState:
    """Tests for TransactionState enum."""

    def test_values(self) -> None:
        assert {state.value for state in TransactionState} == {
            "active",
            "invalidated",
            "restored",
        }
