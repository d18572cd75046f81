"""StorageInterface ABC for packexport configuration stores.

A store holds configuration records keyed by name (``provider.type.id``)
and may be partitioned into named collections. The export engine needs only
list_all(), read() and write(); the remaining operations back the flat-file
export's destination cleanup.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]

DEFAULT_COLLECTION = ""


class StorageInterface(ABC):
    """Abstract configuration store."""

    collection_name: str = DEFAULT_COLLECTION

    @abstractmethod
    def list_all(self, prefix: str = "") -> List[str]:
        """Return the sorted names of every record starting with prefix."""

    @abstractmethod
    def read(self, name: str) -> Optional[Record]:
        """Return the record stored under name, or None if absent."""

    @abstractmethod
    def write(self, name: str, data: Record) -> None:
        """Store data under name, replacing any existing record."""

    @abstractmethod
    def delete(self, name: str) -> bool:
        """Remove one record. Returns False if it did not exist."""

    @abstractmethod
    def get_all_collection_names(self) -> List[str]:
        """Return the names of every non-default collection holding records."""

    @abstractmethod
    def create_collection(self, collection: str) -> "StorageInterface":
        """Return a store of the same kind bound to another collection."""

    def exists(self, name: str) -> bool:
        return self.read(name) is not None

    def read_multiple(self, names: List[str]) -> Dict[str, Record]:
        """Return the records for names, silently omitting absent ones."""
        found: Dict[str, Record] = {}
        for name in names:
            data = self.read(name)
            if data is not None:
                found[name] = data
        return found

    def delete_all(self, prefix: str = "") -> int:
        """Remove every record starting with prefix; returns the count removed."""
        removed = 0
        for name in self.list_all(prefix):
            if self.delete(name):
                removed += 1
        return removed
