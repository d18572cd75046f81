"""Read-only source storages for one export scope.

PackageSourceStorage exposes exactly the records and files of a named
package; FullPackageSourceStorage exposes everything exportable. Both are
views over a configuration store built on the SourceResolver, and are what
the flat-file export reads from.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from packexport.models.entries import ExportScope
from packexport.resolver import SourceResolver
from packexport.storage.base import Record, StorageInterface
from packexport.storage.files import FileRegistry


class PackageSourceStorage:
    """Scope-restricted, read-only view of a configuration store."""

    def __init__(
        self,
        store: StorageInterface,
        scope: ExportScope,
        files: Optional[FileRegistry] = None,
        excluded_types: Iterable[str] = (),
    ) -> None:
        self.store = store
        self.scope = scope
        self.resolver = SourceResolver(store, files=files, excluded_types=excluded_types)
        # Resolved eagerly so an unknown package fails on construction
        self._names: List[str] = self.resolver.config_names(scope)

    def list_all(self) -> List[str]:
        return list(self._names)

    def read(self, name: str) -> Optional[Record]:
        if name not in self._names:
            return None
        return self.store.read(name)

    def get_storage_file_list(self) -> List[str]:
        """Return the uuids of managed files referenced by the scope."""
        return self.resolver.file_uuids(self._names)


class FullPackageSourceStorage(PackageSourceStorage):
    """View of every exportable record in the store."""

    def __init__(
        self,
        store: StorageInterface,
        files: Optional[FileRegistry] = None,
        excluded_types: Iterable[str] = (),
    ) -> None:
        super().__init__(store, ExportScope.full(), files=files, excluded_types=excluded_types)
