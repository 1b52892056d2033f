"""
In-memory store of finished games with YAML persistence.

The store only keeps records; where they live on disk is the caller's choice.
"""
from pathlib import Path
from typing import List, Optional
import logging

from dartkeeper.core import GameRecord, atomic_write_yaml, backup_file, load_yaml

logger = logging.getLogger(__name__)


class HistoryStore:
    """Keeps GameRecords newest first, keyed by record id."""

    def __init__(self, records: Optional[List[GameRecord]] = None):
        self._records: List[GameRecord] = list(records or [])

    @property
    def records(self) -> List[GameRecord]:
        """Snapshot of all records, newest first."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def add(self, record: GameRecord) -> None:
        """
        Add a record (replaces an existing one with the same id).

        Args:
            record: Record to store
        """
        self._records = [r for r in self._records if r.id != record.id]
        self._records.insert(0, record)
        logger.info(f"Game stored: {record.id} ({record.type.value}, {record.winner})")

    def get(self, record_id: str) -> Optional[GameRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def delete(self, record_id: str) -> bool:
        """
        Delete a record by id.

        Returns:
            True if removed, False if not found
        """
        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        removed = len(self._records) < before
        if removed:
            logger.info(f"Game deleted: {record_id}")
        return removed

    def clear(self) -> None:
        self._records = []

    def save(self, filepath: Path, backup: bool = True) -> None:
        """
        Write all records to a YAML file.

        Args:
            filepath: Target file
            backup: Keep a .bak copy of the previous file
        """
        if backup:
            backup_file(filepath)
        atomic_write_yaml(filepath, {"games": [r.to_dict() for r in self._records]})
        logger.info(f"Saved {len(self._records)} game(s) to {filepath}")

    @classmethod
    def load(cls, filepath: Path) -> "HistoryStore":
        """
        Read records written by save().

        Raises:
            FileNotFoundError: If the file does not exist
        """
        data = load_yaml(filepath)
        records = [GameRecord.from_dict(item) for item in data.get("games", [])]
        logger.info(f"Loaded {len(records)} game(s) from {filepath}")
        return cls(records)
