"""Delete transaction models.

A delete transaction records which paths one delete call moved into the
trash and where they ended up, so the call can be undone later.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class TransactionState(str, Enum):
    """Lifecycle state of a delete transaction.

    Attributes:
        ACTIVE: Held in history, every trashed entry still present.
        INVALIDATED: Held in history, but at least one trashed entry is gone.
        RESTORED: No longer held in history (restored or evicted).
    """

    ACTIVE = "active"
    INVALIDATED = "invalidated"
    RESTORED = "restored"


@dataclass(frozen=True, slots=True)
class TrashedPath:
    """One path moved into the trash.

    Attributes:
        original_path: Where the entry lived before deletion.
        trash_path: Where the entry lives inside the trash.
    """

    original_path: str
    trash_path: str

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.original_path:
            msg = "Original path cannot be empty"
            raise ValueError(msg)
        if not self.trash_path:
            msg = "Trash path cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, str]:
        """Serialize to dictionary for JSON storage."""
        return {"original_path": self.original_path, "trash_path": self.trash_path}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrashedPath:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If a field is empty.
        """
        return cls(original_path=data["original_path"], trash_path=data["trash_path"])


@dataclass(frozen=True, slots=True)
class DeleteTransaction:
    """Named group of trash moves produced by one delete call.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        name: Display name given by the caller (the bundle name).
        timestamp: When the deletion happened (ISO 8601, UTC).
        records: Trashed paths, in the order they were trashed.
        privileged: Entries were moved with sudo and must be restored the
            same way.
    """

    id: str
    name: str
    timestamp: str
    records: tuple[TrashedPath, ...]
    privileged: bool = False

    def __post_init__(self) -> None:
        """Validate transaction data after initialization."""
        if not self.id:
            msg = "Transaction ID cannot be empty"
            raise ValueError(msg)
        if not self.name:
            msg = "Transaction name cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if not self.records:
            msg = "Delete transaction must have at least one record"
            raise ValueError(msg)

    @property
    def file_count(self) -> int:
        """Number of trashed paths."""
        return len(self.records)

    @property
    def created_at(self) -> datetime:
        """Timestamp parsed into an aware datetime."""
        return datetime.fromisoformat(self.timestamp)

    @property
    def original_paths(self) -> tuple[str, ...]:
        return tuple(record.original_path for record in self.records)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "name": self.name,
            "timestamp": self.timestamp,
            "file_count": self.file_count,
            "privileged": self.privileged,
            "records": [record.to_dict() for record in self.records],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeleteTransaction:
        """Deserialize from dictionary.

        ``file_count`` is derived from the records and ignored on input.
        Entries written before ``privileged`` existed load as unprivileged.

        Args:
            data: Dictionary containing transaction data.

        Returns:
            DeleteTransaction instance.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        records = tuple(TrashedPath.from_dict(record) for record in data["records"])
        return cls(
            id=data["id"],
            name=data["name"],
            timestamp=data["timestamp"],
            records=records,
            privileged=bool(data.get("privileged", False)),
        )

    def to_json(self) -> str:
        """Serialize to a compact JSON string."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> DeleteTransaction:
        """Deserialize from a JSON string.

        Raises:
            json.JSONDecodeError: If text is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(text))


def create_transaction(
    name: str, records: list[TrashedPath], *, privileged: bool = False
) -> DeleteTransaction:
    """Create a new DeleteTransaction with a fresh ID and timestamp.

    Args:
        name: Display name of the transaction.
        records: Trashed paths, in trash order.
        privileged: Entries were moved with sudo.

    Returns:
        New DeleteTransaction.

    Raises:
        ValueError: If records is empty or name is empty.
    """
    if not records:
        msg = "Cannot create a delete transaction with no records"
        raise ValueError(msg)

    return DeleteTransaction(
        id=uuid.uuid4().hex[:12],
        name=name,
        timestamp=datetime.now(UTC).isoformat(),
        records=tuple(records),
        privileged=privileged,
    )
