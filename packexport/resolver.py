"""Source resolution for packexport.

Turns an ExportScope into the ordered list of entries to export:
configuration names first (sorted), then managed file uuids (sorted).

  - Full scope: every record in the store whose type id is not excluded,
    plus every managed file those records reference.
  - Named scope: the package record, its declared members and the
    transitive closure of their config dependencies, plus the files
    referenced by any of them.

Records reference other records through ``dependencies.config`` and managed
files through ``dependencies.content`` entries of the form
``file:file:<uuid>``. Resolution never writes.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Optional, Set

import networkx as nx

from config.defaults import PACKAGE_CONFIG_PREFIX
from packexport.exceptions import ScopeNotFound
from packexport.models.entries import Entry, ExportScope
from packexport.storage.base import Record, StorageInterface
from packexport.storage.files import FileRegistry, parse_file_reference
from packexport.utils.text import config_type_id

logger = logging.getLogger(__name__)


def _dependency_list(record: Optional[Record], key: str) -> List[str]:
    if not isinstance(record, dict):
        return []
    deps = record.get("dependencies")
    if not isinstance(deps, dict):
        return []
    values = deps.get(key) or []
    return [v for v in values if isinstance(v, str)]


def package_members(record: Record) -> List[str]:
    """Return the config names a package record declares as members.

    Members come from the ``members`` list of the package's JSON ``settings``
    plus its ``dependencies.config``. Settings that are not valid JSON
    contribute nothing.
    """
    members: List[str] = []
    settings: Any = record.get("settings")
    if isinstance(settings, str):
        try:
            settings = json.loads(settings)
        except ValueError:
            logger.warning("Package %s has unparseable settings — ignoring members",
                           record.get("id", "?"))
            settings = None
    if isinstance(settings, dict):
        members.extend(m for m in settings.get("members", []) if isinstance(m, str))
    members.extend(_dependency_list(record, "config"))
    return members


class SourceResolver:
    """Resolve export scopes against a configuration store.

    Args:
        store: Configuration store to enumerate.
        files: Managed file registry. When given, file references that no
            longer resolve to an asset are dropped at resolution time.
        excluded_types: Type ids left out of the export.
    """

    def __init__(
        self,
        store: StorageInterface,
        files: Optional[FileRegistry] = None,
        excluded_types: Iterable[str] = (),
    ) -> None:
        self.store = store
        self.files = files
        self.excluded_types: Set[str] = set(excluded_types)

    def resolve(self, scope: ExportScope) -> List[Entry]:
        """Return the ordered entries for scope.

        Raises:
            ScopeNotFound: If a named scope's package does not exist.
        """
        names = self.config_names(scope)
        file_uuids = self.file_uuids(names)
        entries = [Entry.config(n) for n in names] + [Entry.file(u) for u in file_uuids]
        logger.info(
            "Resolved %s scope: %d config entries, %d files",
            scope.label,
            len(names),
            len(file_uuids),
        )
        return entries

    def is_excluded(self, name: str) -> bool:
        type_id = config_type_id(name)
        return type_id is not None and type_id in self.excluded_types

    def config_names(self, scope: ExportScope) -> List[str]:
        """Return the sorted configuration names belonging to scope."""
        if scope.is_full:
            return [n for n in self.store.list_all() if not self.is_excluded(n)]
        return self._package_closure(scope.package_id)

    def file_uuids(self, names: Iterable[str]) -> List[str]:
        """Return the sorted uuids of managed files referenced by names."""
        found: Set[str] = set()
        for name in names:
            for ref in _dependency_list(self.store.read(name), "content"):
                file_uuid = parse_file_reference(ref)
                if file_uuid is None:
                    continue
                if self.files is not None and self.files.load(file_uuid) is None:
                    logger.warning("%s references missing file %s — skipped", name, file_uuid)
                    continue
                found.add(file_uuid)
        return sorted(found)

    def dependency_graph(self) -> nx.DiGraph:
        """Graph of every stored record with a ``dependencies.config`` edge per dependency.

        Dependencies on records that do not exist still appear as nodes.
        """
        graph = nx.DiGraph()
        for name in self.store.list_all():
            graph.add_node(name)
            for dep in _dependency_list(self.store.read(name), "config"):
                graph.add_edge(name, dep)
        return graph

    def _package_closure(self, package_id: str) -> List[str]:
        package_name = f"{PACKAGE_CONFIG_PREFIX}{package_id}"
        package = self.store.read(package_name)
        if package is None:
            raise ScopeNotFound(package_id)

        graph = self.dependency_graph()
        graph.add_edges_from((package_name, member) for member in package_members(package))

        members = nx.descendants(graph, package_name) | {package_name}
        names: List[str] = []
        for name in sorted(members):
            if name != package_name and self.is_excluded(name):
                continue
            if not self.store.exists(name):
                logger.debug("Package %s member %s does not exist — skipped", package_id, name)
                continue
            names.append(name)
        return names

