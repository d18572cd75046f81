"""Directory-backed configuration stores for packexport.

FileStorage keeps one ``<name>.yml`` file per record; non-default
collections live in sub-directories (collection ``language.fr`` is stored
under ``language/fr/``). PackageFileStorage adds the flat-file export of
managed files and their metadata index.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml

from config.defaults import CONFIG_EXTENSION, FILE_INDEX_FILENAME
from packexport.exceptions import EncodingError
from packexport.io.encoder import encode_record
from packexport.io.persistence import atomic_write_text, load_json, save_json
from packexport.storage.base import DEFAULT_COLLECTION, Record, StorageInterface
from packexport.storage.files import FileRegistry, build_file_export_entry

logger = logging.getLogger(__name__)

_SUFFIX = f".{CONFIG_EXTENSION}"


class FileStorage(StorageInterface):
    """Store records as YAML files inside a directory."""

    def __init__(self, directory: str | Path, collection: str = DEFAULT_COLLECTION) -> None:
        self.directory = Path(directory)
        self.collection_name = collection

    @property
    def collection_path(self) -> Path:
        if not self.collection_name:
            return self.directory
        return self.directory.joinpath(*self.collection_name.split("."))

    def get_file_path(self, name: str) -> Path:
        return self.collection_path / f"{name}{_SUFFIX}"

    def list_all(self, prefix: str = "") -> List[str]:
        if not self.collection_path.is_dir():
            return []
        names = [
            p.name[: -len(_SUFFIX)]
            for p in self.collection_path.iterdir()
            if p.is_file() and p.name.endswith(_SUFFIX)
        ]
        return sorted(n for n in names if n.startswith(prefix))

    def read(self, name: str) -> Optional[Record]:
        path = self.get_file_path(name)
        if not path.is_file():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise EncodingError(f"Invalid YAML in {path}: {exc}") from exc
        return data if data is not None else {}

    def write(self, name: str, data: Record) -> None:
        atomic_write_text(self.get_file_path(name), encode_record(data))

    def exists(self, name: str) -> bool:
        return self.get_file_path(name).is_file()

    def delete(self, name: str) -> bool:
        try:
            self.get_file_path(name).unlink()
        except FileNotFoundError:
            return False
        return True

    def get_all_collection_names(self) -> List[str]:
        if not self.collection_path.is_dir():
            return []
        collections = set()
        for dirpath, _dirnames, filenames in os.walk(self.collection_path):
            rel = Path(dirpath).relative_to(self.collection_path)
            if rel == Path("."):
                continue
            if any(f.endswith(_SUFFIX) for f in filenames):
                collections.add(".".join(rel.parts))
        return sorted(collections)

    def create_collection(self, collection: str) -> "FileStorage":
        return type(self)(self.directory, collection)


class PackageFileStorage(FileStorage):
    """Flat-file export destination: YAML records plus managed files.

    Exported files are copied next to the records under their original
    filenames, and FILE_INDEX_FILENAME maps each file's dependency name to
    its metadata.
    """

    def __init__(
        self,
        directory: str | Path,
        collection: str = DEFAULT_COLLECTION,
        files: Optional[FileRegistry] = None,
    ) -> None:
        super().__init__(directory, collection)
        self.files = files if files is not None else FileRegistry()

    @property
    def index_path(self) -> Path:
        return self.collection_path / FILE_INDEX_FILENAME

    def create_collection(self, collection: str) -> "PackageFileStorage":
        return PackageFileStorage(self.directory, collection, files=self.files)

    def export_files(self, file_uuids: Iterable[str]) -> int:
        """Copy managed files into the directory and write the file index.

        Unknown uuids are logged and skipped.

        Args:
            file_uuids: Uuids of the files to export.

        Returns:
            Number of files exported.
        """
        self.collection_path.mkdir(parents=True, exist_ok=True)
        index: Dict[str, Dict] = {}
        for file_uuid in file_uuids:
            asset = self.files.load(file_uuid)
            if asset is None:
                logger.warning("Managed file %s not found — skipped", file_uuid)
                continue
            target = self.collection_path / asset.filename
            with asset.open() as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
            if asset.created:
                os.utime(target, (asset.created, asset.created))
            index[asset.dependency_name] = build_file_export_entry(asset)

        if index:
            save_json(index, self.index_path)
        logger.info("Exported %d managed files to %s", len(index), self.collection_path)
        return len(index)

    def delete_all(self, prefix: str = "") -> int:
        """Remove records and, for a full wipe, previously exported files."""
        removed = super().delete_all(prefix)
        if prefix:
            return removed

        previous = load_json(self.index_path) or {}
        for entry in previous.values():
            filename = entry.get("filename") if isinstance(entry, dict) else None
            if filename:
                try:
                    (self.collection_path / filename).unlink()
                    removed += 1
                except FileNotFoundError:
                    pass
        try:
            self.index_path.unlink()
        except FileNotFoundError:
            pass
        return removed
