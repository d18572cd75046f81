"""In-memory configuration store."""

from __future__ import annotations

import copy
from typing import Dict, List, Optional

from packexport.storage.base import DEFAULT_COLLECTION, Record, StorageInterface


class MemoryStorage(StorageInterface):
    """Dict-backed store. Collections share one underlying dict of dicts.

    Records are deep-copied on the way in and out, so callers can never
    mutate stored data through a returned reference.
    """

    def __init__(
        self,
        records: Optional[Dict[str, Record]] = None,
        collection: str = DEFAULT_COLLECTION,
        _collections: Optional[Dict[str, Dict[str, Record]]] = None,
    ) -> None:
        self.collection_name = collection
        self._collections = _collections if _collections is not None else {}
        self._collections.setdefault(collection, {})
        for name, data in (records or {}).items():
            self.write(name, data)

    @property
    def _data(self) -> Dict[str, Record]:
        return self._collections[self.collection_name]

    def list_all(self, prefix: str = "") -> List[str]:
        return sorted(name for name in self._data if name.startswith(prefix))

    def read(self, name: str) -> Optional[Record]:
        data = self._data.get(name)
        return copy.deepcopy(data) if data is not None else None

    def write(self, name: str, data: Record) -> None:
        self._data[name] = copy.deepcopy(data)

    def delete(self, name: str) -> bool:
        return self._data.pop(name, None) is not None

    def get_all_collection_names(self) -> List[str]:
        return sorted(
            name for name, records in self._collections.items()
            if name != DEFAULT_COLLECTION and records
        )

    def create_collection(self, collection: str) -> "MemoryStorage":
        return MemoryStorage(collection=collection, _collections=self._collections)
