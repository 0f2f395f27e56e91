"""
Storage Backend Module

Provides the abstract storage interface and two implementations: in-memory
(testing) and JSON flat files (persistence). Each collection is one JSON
array rewritten in full on every flush. All monetary values are stored as
Decimal strings.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union
from decimal import Decimal
from datetime import datetime
import copy
import json
import os
import tempfile
import threading
from dataclasses import dataclass, asdict
from enum import Enum
from pathlib import Path
from contextlib import contextmanager

from .exceptions import StorageError


@dataclass
class StorageRecord:
    """Base class for all stored records"""
    id: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for storage"""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, Decimal):
                result[key] = str(value)
            elif isinstance(value, Enum):
                result[key] = value.value
        return result


class StorageInterface(ABC):
    """Abstract interface for storage backends"""

    @abstractmethod
    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        """Save a record to storage"""
        pass

    @abstractmethod
    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a record from storage"""
        pass

    @abstractmethod
    def load_all(self, table: str) -> List[Dict[str, Any]]:
        """Load all records from a table in insertion order"""
        pass

    @abstractmethod
    def delete(self, table: str, record_id: str) -> bool:
        """Delete a record from storage"""
        pass

    @abstractmethod
    def exists(self, table: str, record_id: str) -> bool:
        """Check if a record exists"""
        pass

    @abstractmethod
    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find records matching filters"""
        pass

    @abstractmethod
    def count(self, table: str) -> int:
        """Count records in table"""
        pass

    @abstractmethod
    def clear_table(self, table: str) -> None:
        """Clear all records from a table"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close storage"""
        pass

    def begin_transaction(self) -> None:
        """Start a transaction (default no-op)"""
        pass

    def commit(self) -> None:
        """Commit current transaction (default no-op)"""
        pass

    def rollback(self) -> None:
        """Rollback current transaction (default no-op)"""
        pass

    @contextmanager
    def atomic(self):
        """Context manager for atomic operations"""
        self.begin_transaction()
        try:
            yield
        except Exception:
            self.rollback()
            raise
        self.commit()


def _matches(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    for key, value in filters.items():
        if key not in record or record[key] != value:
            return False
    return True


class _SnapshotStorage(StorageInterface):
    """
    Collection store held in memory with snapshot transactions.

    A transaction holds the storage lock from begin to commit/rollback, so
    every atomic block runs its read-modify-write cycle alone. Nested
    atomic blocks join the outermost one.
    """

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._depth = 0
        self._snapshot: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None
        self._dirty: set = set()

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        if table not in self._data:
            self._data[table] = self._read_table(table)
        return self._data[table]

    def _read_table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return {}

    def _write_table(self, table: str) -> None:
        pass

    def _touch(self, table: str) -> None:
        if self._depth:
            self._dirty.add(table)
            return
        try:
            self._write_table(table)
        except StorageError:
            self._data.pop(table, None)
            raise

    def save(self, table: str, record_id: str, data: Dict[str, Any]) -> None:
        with self._lock:
            # Round-trip through JSON so callers never share references
            self._table(table)[record_id] = json.loads(json.dumps(data, default=str))
            self._touch(table)

    def load(self, table: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._table(table).get(record_id)
            if record is None:
                return None
            return copy.deepcopy(record)

    def load_all(self, table: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [copy.deepcopy(record) for record in self._table(table).values()]

    def delete(self, table: str, record_id: str) -> bool:
        with self._lock:
            records = self._table(table)
            if record_id not in records:
                return False
            del records[record_id]
            self._touch(table)
            return True

    def exists(self, table: str, record_id: str) -> bool:
        with self._lock:
            return record_id in self._table(table)

    def find(self, table: str, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        with self._lock:
            return [
                copy.deepcopy(record)
                for record in self._table(table).values()
                if _matches(record, filters)
            ]

    def count(self, table: str) -> int:
        with self._lock:
            return len(self._table(table))

    def clear_table(self, table: str) -> None:
        with self._lock:
            self._data[table] = {}
            self._touch(table)

    def begin_transaction(self) -> None:
        self._lock.acquire()
        if self._depth == 0:
            self._snapshot = copy.deepcopy(self._data)
            self._dirty = set()
        self._depth += 1

    def commit(self) -> None:
        try:
            self._depth -= 1
            if self._depth == 0:
                dirty, self._dirty = sorted(self._dirty), set()
                self._snapshot = None
                for position, table in enumerate(dirty):
                    try:
                        self._write_table(table)
                    except StorageError:
                        # Unflushed collections are reloaded from disk on next access
                        for pending in dirty[position:]:
                            self._data.pop(pending, None)
                        raise
        finally:
            self._lock.release()

    def rollback(self) -> None:
        try:
            self._depth -= 1
            if self._depth == 0:
                if self._snapshot is not None:
                    self._data = self._snapshot
                self._snapshot = None
                self._dirty = set()
        finally:
            self._lock.release()

    def close(self) -> None:
        pass


class InMemoryStorage(_SnapshotStorage):
    """In-memory storage implementation for testing"""


class JSONFileStorage(_SnapshotStorage):
    """
    Flat-file storage: one ``<table>.json`` array per collection.

    Outside a transaction every mutation rewrites the whole collection file.
    Inside one, touched collections are flushed at commit. A commit that fails
    part-way leaves already-flushed collections on disk and raises StorageError.
    """

    def __init__(self, data_dir: Union[str, Path] = "data"):
        super().__init__()
        self.data_dir = Path(data_dir)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create data directory {self.data_dir}: {e}") from e

    def _path(self, table: str) -> Path:
        return self.data_dir / f"{table}.json"

    def _read_table(self, table: str) -> Dict[str, Dict[str, Any]]:
        path = self._path(table)
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as fh:
                records = json.load(fh)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read collection {table}: {e}") from e
        if not isinstance(records, list):
            raise StorageError(f"Collection {table} is not a JSON array")
        return {record["id"]: record for record in records}

    def _write_table(self, table: str) -> None:
        path = self._path(table)
        records = list(self._data.get(table, {}).values())
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(self.data_dir), prefix=f".{table}.", suffix=".tmp")
        except OSError as e:
            raise StorageError(f"Cannot write collection {table}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, default=str)
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"Cannot write collection {table}: {e}") from e


def create_storage(backend: str, data_dir: Union[str, Path] = "data") -> StorageInterface:
    """Build a storage backend by name"""
    if backend == "memory":
        return InMemoryStorage()
    if backend == "json":
        return JSONFileStorage(data_dir)
    raise ValueError(f"Unknown storage backend: {backend}")
