"""Flat-file (directory) export for packexport.

Writes a package's configuration records as individual YAML files, plus its
managed files and their index, into a destination directory. This is the
non-archive export mode used by the ``packexport export`` command.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from packexport.exceptions import DestinationUnresolved, ExportAborted
from packexport.models.export import DirectoryExportResult
from packexport.storage.file_storage import PackageFileStorage
from packexport.storage.files import FileRegistry
from packexport.storage.package_storage import PackageSourceStorage

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]


def resolve_destination(path: Optional[str], default: Optional[str]) -> str:
    """Pick the export directory, normalised with a trailing slash.

    Raises:
        DestinationUnresolved: If neither path nor default is set.
    """
    destination = path or default
    if not destination:
        raise DestinationUnresolved(
            "No destination directory provided and no value set in "
            "PACKEXPORT_SYNC_DIR settings."
        )
    if not destination.endswith("/"):
        destination += "/"
    return destination


def prepare_target(
    destination: str,
    files: Optional[FileRegistry] = None,
    confirm: Optional[ConfirmCallback] = None,
) -> PackageFileStorage:
    """Return the destination store, emptied after confirmation if needed.

    A non-empty destination is wiped (default collection and every other
    collection) only when confirm() agrees.

    Raises:
        ExportAborted: If the destination holds files and the caller declines.
    """
    target = PackageFileStorage(destination, files=files)
    directory = Path(destination)

    if directory.is_dir() and any(directory.iterdir()):
        prompt = (
            f"The .yml files in your export directory ({destination}) will be deleted "
            "and replaced with the package config and files."
        )
        if confirm is None or not confirm(prompt):
            raise ExportAborted("Export cancelled: destination directory is not empty.")

        removed = target.delete_all()
        for collection_name in target.get_all_collection_names():
            removed += target.create_collection(collection_name).delete_all()
        logger.info("Cleared %d existing entries from %s", removed, destination)

    return target


def export_to_directory(
    source: PackageSourceStorage,
    target: PackageFileStorage,
) -> DirectoryExportResult:
    """Copy every record and managed file of source into target."""
    result = DirectoryExportResult()
    for name in source.list_all():
        data = source.read(name)
        if data is None:
            logger.info("Config %s disappeared before export — skipped", name)
            continue
        target.write(name, data)
        result.config_count += 1

    result.file_count = target.export_files(source.get_storage_file_list())
    logger.info(result.message)
    return result
