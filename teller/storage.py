"""
Storage Backend Module

Provides the document store used by the ledger: a durable mapping from
entity-set name (customers, accounts, transactions) to an ordered list of
records, read and overwritten whole. Implementations exist for in-memory
(testing) and JSON files on disk (persistence). Monetary values are stored
as Decimal strings.

Writes happen inside a unit of work opened with ``atomic()``. The unit of
work holds the store's writer lock, stages every ``save_set`` call, and
commits all staged sets together when the block exits cleanly. Readers
outside the unit of work keep seeing the last committed state.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any, Union
from decimal import Decimal
from datetime import datetime
from enum import Enum
import json
import os
import tempfile
import threading
from dataclasses import dataclass, fields
from pathlib import Path
from contextlib import contextmanager

from .errors import StorageError
from .logging_config import get_logger


CUSTOMERS = "customers"
ACCOUNTS = "accounts"
TRANSACTIONS = "transactions"
ENTITY_SETS = (CUSTOMERS, ACCOUNTS, TRANSACTIONS)


def camel_case(name: str) -> str:
    """Convert a snake_case field name to its camelCase document key"""
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """Parse an ISO-8601 timestamp, accepting the trailing 'Z' JavaScript writes"""
    if isinstance(value, datetime):
        return value
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    return datetime.fromisoformat(value)


@dataclass
class StorageRecord:
    """Base class for all stored records"""
    id: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a camelCase dictionary for storage and the wire"""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = str(value)
            elif isinstance(value, Enum):
                value = value.value
            result[camel_case(f.name)] = value
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StorageRecord':
        """Create instance from a stored dictionary"""
        kwargs = {}
        for f in fields(cls):
            key = camel_case(f.name)
            if key in data:
                kwargs[f.name] = data[key]
        return cls(**kwargs)


def _copy(records: Any) -> Any:
    """Deep copy through JSON so callers never share structure with the store"""
    return json.loads(json.dumps(records, default=str))


class DocumentStore(ABC):
    """Abstract whole-set document store with a single-writer unit of work"""

    def __init__(self):
        self._write_lock = threading.RLock()
        self._state_lock = threading.RLock()
        self._owner: Optional[int] = None
        self._depth = 0
        self._staged: Dict[str, List[Dict[str, Any]]] = {}
        self.logger = get_logger("teller.storage")

    @abstractmethod
    def _read(self, name: str) -> List[Dict[str, Any]]:
        """Read the committed records of one entity set"""
        pass

    @abstractmethod
    def _commit(self, changes: Dict[str, List[Dict[str, Any]]]) -> None:
        """Durably replace every entity set in changes, all or nothing"""
        pass

    def _check_name(self, name: str) -> None:
        if name not in ENTITY_SETS:
            raise StorageError(f"Unknown entity set: {name}")

    def _in_unit_of_work(self) -> bool:
        return self._owner == threading.get_ident()

    def load_set(self, name: str) -> List[Dict[str, Any]]:
        """Read a snapshot of an entity set (staged version inside atomic())"""
        self._check_name(name)
        if self._in_unit_of_work() and name in self._staged:
            return _copy(self._staged[name])
        with self._state_lock:
            return self._read(name)

    def save_set(self, name: str, records: List[Dict[str, Any]]) -> None:
        """Overwrite an entity set; staged until the unit of work commits"""
        self._check_name(name)
        if not self._in_unit_of_work():
            with self.atomic():
                self.save_set(name, records)
            return
        self._staged[name] = _copy(records)

    def load_sets(self, *names: str) -> Dict[str, List[Dict[str, Any]]]:
        """Read several entity sets as of the same committed state"""
        for name in names:
            self._check_name(name)
        with self._state_lock:
            return {name: self.load_set(name) for name in names}

    def count(self, name: str) -> int:
        """Count records in an entity set"""
        return len(self.load_set(name))

    @contextmanager
    def atomic(self):
        """
        Serialize a read-validate-mutate-write sequence.

        Nested blocks on the same thread join the outermost unit of work,
        which is the only one that commits.
        """
        with self._write_lock:
            outermost = self._depth == 0
            if outermost:
                self._owner = threading.get_ident()
                self._staged = {}
            self._depth += 1
            try:
                yield self
                if outermost and self._staged:
                    with self._state_lock:
                        self._commit(self._staged)
            finally:
                self._depth -= 1
                if outermost:
                    self._owner = None
                    self._staged = {}


class InMemoryDocumentStore(DocumentStore):
    """In-memory storage implementation for testing"""

    def __init__(self):
        super().__init__()
        self._data: Dict[str, List[Dict[str, Any]]] = {name: [] for name in ENTITY_SETS}

    def _read(self, name: str) -> List[Dict[str, Any]]:
        return _copy(self._data[name])

    def _commit(self, changes: Dict[str, List[Dict[str, Any]]]) -> None:
        for name, records in changes.items():
            self._data[name] = _copy(records)

    def get_all_data(self) -> Dict[str, List[Dict[str, Any]]]:
        """Get all data for debugging/inspection"""
        with self._state_lock:
            return _copy(self._data)


class JSONFileDocumentStore(DocumentStore):
    """JSON file storage implementation, one pretty-printed document per entity set"""

    def __init__(self, data_dir: Union[str, Path] = "data"):
        super().__init__()
        self.data_dir = Path(data_dir)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            for name in ENTITY_SETS:
                path = self.path_for(name)
                if not path.exists():
                    self._write_file(path, "[]")
        except OSError as e:
            raise StorageError(f"Cannot initialize data directory {self.data_dir}: {e}") from e

    def path_for(self, name: str) -> Path:
        """Path of the document holding an entity set"""
        return self.data_dir / f"{name}.json"

    def _read(self, name: str) -> List[Dict[str, Any]]:
        path = self.path_for(name)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                records = json.load(fh)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to read {path}: {e}")
            raise StorageError(f"Cannot read {name}: {e}") from e

        if not isinstance(records, list):
            raise StorageError(f"Document {path} does not hold a list of records")
        return records

    def _write_file(self, path: Path, text: str) -> None:
        """Write text to path via a temp file and an atomic rename"""
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                fh.write(text)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _commit(self, changes: Dict[str, List[Dict[str, Any]]]) -> None:
        previous: Dict[str, Optional[str]] = {}
        try:
            for name, records in changes.items():
                path = self.path_for(name)
                previous[name] = path.read_text(encoding='utf-8') if path.exists() else None
                self._write_file(path, json.dumps(records, indent=2, default=str))
        except OSError as e:
            self.logger.error(f"Commit failed, restoring {sorted(previous)}: {e}")
            self._restore(previous)
            raise StorageError(f"Cannot write data: {e}") from e

    def _restore(self, previous: Dict[str, Optional[str]]) -> None:
        """Put back documents already replaced by a failed commit"""
        for name, text in previous.items():
            path = self.path_for(name)
            try:
                if text is None:
                    if path.exists():
                        path.unlink()
                else:
                    self._write_file(path, text)
            except OSError as e:
                self.logger.error(f"Could not restore {path}: {e}")
