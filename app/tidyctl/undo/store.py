"""Persistence of the undo history.

The history is small (a few dozen transactions at most), so the whole
document is rewritten on every change instead of being appended to.

Storage location: ~/.local/state/tidyctl/undo-history.json
"""

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from tidyctl.core.paths import get_history_path
from tidyctl.undo.models import DeleteTransaction

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class HistoryStoreError(Exception):
    """Raised when the history file cannot be written."""


class HistoryStore:
    """Reads and writes the undo history as one JSON document.

    Document layout::

        {"version": 1, "transactions": [<newest>, ..., <oldest>]}

    Args:
        path: History file. Defaults to the user state directory.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path is not None else get_history_path()

    @property
    def path(self) -> Path:
        """Location of the history file."""
        return self._path

    def load(self) -> list[DeleteTransaction]:
        """Read the stored transactions, newest first.

        A missing file yields an empty list. An unreadable or malformed
        file, or single malformed transactions, are skipped with a warning.

        Returns:
            Stored transactions, newest first.
        """
        if not self._path.exists():
            return []

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable history file %s: %s", self._path, e)
            return []

        raw_entries: Any = data.get("transactions", []) if isinstance(data, dict) else None
        if not isinstance(raw_entries, list):
            logger.warning("Ignoring malformed history file %s", self._path)
            return []

        transactions: list[DeleteTransaction] = []
        for index, raw in enumerate(raw_entries):
            try:
                transactions.append(DeleteTransaction.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping corrupt history entry %d: %s", index, e)
        return transactions

    def save(self, transactions: list[DeleteTransaction]) -> None:
        """Replace the stored history atomically.

        Args:
            transactions: Transactions to store, newest first.

        Raises:
            HistoryStoreError: If the file cannot be written.
        """
        document = {
            "version": FORMAT_VERSION,
            "transactions": [transaction.to_dict() for transaction in transactions],
        }

        tmp_path: Path | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                json.dump(document, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self._path)
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise HistoryStoreError(f"Failed to write history to {self._path}: {e}") from e
