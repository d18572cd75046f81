"""Archive writer for packexport.

Owns the gzip-compressed tar artifact of one export run:

  <asset filename>        raw bytes of each managed file (mtime = created)
  <config name>.yml       each configuration record, encoded to YAML
  package_files.json      the file index, always the last member

The tar handle stays open across batches; members are appended one at a
time and file bytes are streamed from a per-asset read handle. An artifact
without the index member is incomplete and must not be used.
"""

from __future__ import annotations

import io
import json
import logging
import os
import tarfile
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config.defaults import CONFIG_EXTENSION, FILE_INDEX_FILENAME
from packexport.exceptions import AssetNotFound, DeleteFailed, ExportError
from packexport.io.encoder import encode_record
from packexport.io.persistence import dumps_pretty
from packexport.models.entries import Batch, EntryKind
from packexport.models.export import BatchResult, ExportIndex
from packexport.storage.base import Record, StorageInterface
from packexport.storage.files import FileAsset, FileRegistry, build_file_export_entry

logger = logging.getLogger(__name__)

_MEMBER_MODE = 0o644


def reset_artifact(path: str | Path) -> bool:
    """Delete a stale artifact.

    Returns:
        True if a file was removed, False if there was nothing to remove.

    Raises:
        DeleteFailed: If the file exists but cannot be removed.
    """
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise DeleteFailed(f"Could not delete stale artifact {path}: {exc}") from exc
    logger.info("Removed stale artifact %s", path)
    return True


class ArchiveWriter:
    """Append-only writer for one export artifact.

    Use open_or_reset() rather than the constructor.
    """

    def __init__(
        self,
        path: Path,
        archive: tarfile.TarFile,
        store: StorageInterface,
        files: FileRegistry,
        mtime: int,
    ) -> None:
        self.path = path
        self.store = store
        self.files = files
        self.mtime = mtime
        self._archive: Optional[tarfile.TarFile] = archive
        self.member_count = 0
        self.finalized = False

    @classmethod
    def open_or_reset(
        cls,
        path: str | Path,
        store: StorageInterface,
        files: Optional[FileRegistry] = None,
        mtime: Optional[int] = None,
    ) -> "ArchiveWriter":
        """Remove any artifact at path and open a fresh compressed archive.

        Args:
            path: Artifact location.
            store: Configuration store records are read from.
            files: Managed file registry.
            mtime: Timestamp for configuration and index members (default: now).

        Raises:
            DeleteFailed: If a stale artifact cannot be removed.
        """
        path = Path(path)
        reset_artifact(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        archive = tarfile.open(path, "w:gz")
        logger.debug("Opened artifact %s", path)
        return cls(
            path=path,
            archive=archive,
            store=store,
            files=files if files is not None else FileRegistry(),
            mtime=int(time.time()) if mtime is None else mtime,
        )

    @property
    def closed(self) -> bool:
        return self._archive is None

    def _require_open(self) -> tarfile.TarFile:
        if self._archive is None:
            raise ExportError(f"Artifact {self.path} is already closed")
        return self._archive

    def _add_bytes(self, member_name: str, data: bytes, mtime: int) -> None:
        info = tarfile.TarInfo(member_name)
        info.size = len(data)
        info.mtime = mtime
        info.mode = _MEMBER_MODE
        self._require_open().addfile(info, io.BytesIO(data))
        self.member_count += 1

    def write(self, name: str, record: Record) -> None:
        """Encode one configuration record into ``<name>.yml``."""
        self._add_bytes(
            f"{name}.{CONFIG_EXTENSION}",
            encode_record(record).encode("utf-8"),
            self.mtime,
        )

    def add_file(self, asset: FileAsset) -> Dict[str, Any]:
        """Stream one managed file into the archive.

        Returns:
            The asset's index metadata.

        Raises:
            AssetNotFound: If the asset's bytes are missing on disk.
        """
        archive = self._require_open()
        info = tarfile.TarInfo(asset.filename)
        info.mtime = asset.created
        info.mode = _MEMBER_MODE
        try:
            with asset.open() as handle:
                info.size = os.fstat(handle.fileno()).st_size
                archive.addfile(info, handle)
        except FileNotFoundError as exc:
            raise AssetNotFound(asset.uuid, f"{asset.uri} is missing") from exc
        self.member_count += 1
        return build_file_export_entry(asset)

    def append_batch(self, batch: Batch) -> BatchResult:
        """Write every entry of batch, in order.

        Config records that vanished since resolution are skipped. Any other
        failure aborts the batch; members already written stay in place.

        Raises:
            AssetNotFound: If a file entry no longer resolves to an asset.
            EncodingError: If a record cannot be encoded.
        """
        self._require_open()
        result = BatchResult(index=batch.index)

        for entry in batch.entries:
            if entry.kind is EntryKind.FILE:
                asset = self.files.load(entry.identifier)
                if asset is None:
                    raise AssetNotFound(entry.identifier)
                result.files[asset.dependency_name] = self.add_file(asset)
                result.file_count += 1
            else:
                record = self.store.read(entry.identifier)
                if record is None:
                    logger.info("Config %s disappeared before export — skipped", entry.identifier)
                    result.skipped += 1
                else:
                    self.write(entry.identifier, record)
                    result.config_count += 1
            result.processed += 1

        result.message = (
            f"batch {batch.index + 1}: processed {batch.offset + result.processed} "
            f"of {batch.total_entries} entries"
        )
        logger.debug(result.message)
        return result

    def finalize(self, index: ExportIndex) -> None:
        """Write the index as the last member and close the artifact."""
        self._add_bytes(FILE_INDEX_FILENAME, dumps_pretty(index).encode("utf-8"), self.mtime)
        self.finalized = True
        self.close()
        logger.info("Finalized artifact %s (%d members)", self.path, self.member_count)

    def close(self) -> None:
        """Close the artifact. Without a prior finalize() it stays incomplete."""
        if self._archive is not None:
            self._archive.close()
            self._archive = None


def read_archive_index(path: str | Path) -> Optional[ExportIndex]:
    """Return the index of a finalized artifact, or None if it is incomplete."""
    try:
        with tarfile.open(path, "r:gz") as archive:
            try:
                member = archive.getmember(FILE_INDEX_FILENAME)
            except KeyError:
                return None
            handle = archive.extractfile(member)
            if handle is None:
                return None
            return json.loads(handle.read().decode("utf-8"))
    except (tarfile.TarError, EOFError, OSError) as exc:
        logger.warning("Could not read artifact %s: %s", path, exc)
        return None
