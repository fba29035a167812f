"""JSON index file repository for one collection."""

import json
import os
import shutil
import threading
import uuid
from pathlib import Path
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from common.logging_config import get_logger
from mediaserver.exceptions import IndexCorruptError
from mediaserver.storage import to_storage_error
from mediaserver.types import MovieRecord, PrintRecord

logger = get_logger(__name__)

R = TypeVar("R", MovieRecord, PrintRecord)

_index_locks: Dict[str, threading.Lock] = {}
_index_locks_guard = threading.Lock()


def _lock_for(index_path: Path) -> threading.Lock:
    key = os.path.abspath(index_path)
    with _index_locks_guard:
        lock = _index_locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _index_locks[key] = lock
        return lock


class IndexStore(Generic[R]):
    """
    Durable identifier -> record mapping backed by one JSON array file.

    The file is read in full on every call; nothing is cached between calls.
    Mutations go through append()/remove(), which hold a lock shared by every
    store on the same index path so load -> mutate -> save is atomic within
    the process.
    """

    def __init__(self, index_path: Path, record_factory: Callable[[dict], R]):
        """
        Args:
            index_path: Location of the JSON index file
            record_factory: Builds a record from one decoded JSON object
        """
        self.index_path = Path(index_path)
        self.record_factory = record_factory
        self._lock = _lock_for(self.index_path)

    def load(self, strict: bool = False) -> List[R]:
        """
        Read every record from the index file.

        Args:
            strict: Raise on an undecodable index instead of reading it as
                empty. Callers that act on "no record references this file"
                use it so a damaged index never looks like an empty one.

        Returns:
            Records in file order; empty if the file is missing or corrupt

        Raises:
            StorageError: If the file exists but cannot be read
            IndexCorruptError: If strict and the file is not a JSON array
        """
        try:
            with open(self.index_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            if strict:
                raise IndexCorruptError(f"Index {self.index_path.name} cannot be parsed: {e}") from e
            logger.warning(f"Failed to parse index {self.index_path}: {e}, treating as empty")
            self._backup_corrupt_index()
            return []
        except OSError as e:
            raise to_storage_error(e, f"Failed to read index {self.index_path.name}") from e

        if not isinstance(data, list):
            if strict:
                raise IndexCorruptError(f"Index {self.index_path.name} is not a JSON array")
            logger.warning(f"Index {self.index_path} is not a JSON array, treating as empty")
            self._backup_corrupt_index()
            return []

        records = []
        for position, entry in enumerate(data):
            if not isinstance(entry, dict):
                logger.warning(f"Skipping non-object entry {position} in {self.index_path.name}")
                continue
            try:
                records.append(self.record_factory(entry))
            except ValueError as e:
                logger.warning(f"Skipping entry {position} in {self.index_path.name}: {e}")
        return records

    def save(self, records: List[R]) -> None:
        """
        Overwrite the index file with the given records.

        The JSON is written to a sibling temp file and moved over the index so
        readers never observe a half-written file.

        Raises:
            StorageError: If the index cannot be written
        """
        payload = [record.to_dict() for record in records]
        tmp_path = self.index_path.with_name(f".{self.index_path.name}.{uuid.uuid4().hex}.tmp")
        try:
            self.index_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.index_path)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise to_storage_error(e, f"Failed to write index {self.index_path.name}") from e
        logger.debug(f"Saved {len(payload)} records to {self.index_path}")

    def list(self) -> List[R]:
        """
        Records sorted newest first by their creation/upload timestamp.
        """
        return sorted(self.load(), key=lambda record: record.timestamp or 0, reverse=True)

    def find_by_id(self, record_id: str) -> Optional[R]:
        """
        Find a record by identifier.

        Repeated identifiers are not deduplicated; the most recently appended
        record wins.
        """
        match = None
        for record in self.load():
            if record.id == record_id:
                match = record
        return match

    def append(self, record: R) -> R:
        """
        Add a record to the end of the index.
        """
        with self._lock:
            records = self.load()
            records.append(record)
            self.save(records)
        return record

    def remove(self, record_id: str) -> List[R]:
        """
        Drop every record with the given identifier.

        Returns:
            The removed records, in file order
        """
        with self._lock:
            records = self.load()
            kept = [record for record in records if record.id != record_id]
            removed = [record for record in records if record.id == record_id]
            if removed:
                self.save(kept)
        return removed

    def is_reserved_name(self, filename: str) -> bool:
        """
        Check whether a filename belongs to the index itself: the index file,
        its corrupt-index backup, or an in-flight save's temp file.

        Compared case-insensitively so case-insensitive filesystems are covered.
        """
        name = filename.casefold()
        index_name = self.index_path.name.casefold()
        if name in (index_name, f"{index_name}.bak"):
            return True
        return name.startswith(f".{index_name}.") and name.endswith(".tmp")

    def _backup_corrupt_index(self) -> None:
        backup_path = self.index_path.with_name(self.index_path.name + '.bak')
        try:
            shutil.copy(self.index_path, backup_path)
        except OSError as e:
            logger.warning(f"Could not back up corrupt index {self.index_path}: {e}")
