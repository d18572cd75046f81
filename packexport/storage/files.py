"""Managed file assets for packexport.

A FileAsset is a binary file referenced from configuration by uuid. The
FileRegistry resolves uuids to assets; bytes are read lazily through
FileAsset.open() so that callers stream one asset at a time.

Registry YAML format:

    files:
      - uuid: 7d1c9d0e-2f0a-4c36-9b3e-5f1f6f0f6a11
        filename: hero.png
        uri: files/hero.png          # relative to the registry file
        created: 2024-01-15T10:00:00Z  # or an epoch integer
        filemime: image/png
        status: 1
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

import yaml
from dateutil import parser as dateutil_parser

from config.defaults import FILE_DEPENDENCY_PREFIX
from packexport.models.entries import is_valid_uuid

logger = logging.getLogger(__name__)

_SCALARS = (str, int, float, bool)


@dataclass
class FileAsset:
    """A managed binary file."""

    uuid: str
    filename: str
    uri: str
    created: int = 0          # POSIX timestamp used as the archive member mtime
    fields: Dict[str, Any] = field(default_factory=dict)   # extra entity fields

    @property
    def dependency_name(self) -> str:
        """Name under which configuration references this file."""
        return f"{FILE_DEPENDENCY_PREFIX}{self.uuid}"

    @property
    def size(self) -> int:
        return os.stat(self.uri).st_size

    @contextmanager
    def open(self) -> Iterator[BinaryIO]:
        """Open a read handle on the asset bytes, closed on exit."""
        handle = open(self.uri, "rb")
        try:
            yield handle
        finally:
            handle.close()

    def field_values(self) -> Dict[str, Any]:
        """Return every field of the asset, base fields first."""
        values: Dict[str, Any] = {
            "uuid": self.uuid,
            "filename": self.filename,
            "uri": self.uri,
            "created": self.created,
        }
        values.update(self.fields)
        return values


def build_file_export_entry(asset: FileAsset) -> Dict[str, Any]:
    """Flatten an asset's fields into the metadata struct stored in the index.

    Fields without a value and fields holding structured values are left out.
    """
    struct: Dict[str, Any] = {}
    for key, value in asset.field_values().items():
        if value is None or not isinstance(value, _SCALARS):
            continue
        struct[key] = value
    return struct


def parse_file_reference(reference: str) -> Optional[str]:
    """Return the uuid of a ``file:file:<uuid>`` reference, or None."""
    if not isinstance(reference, str) or not reference.startswith(FILE_DEPENDENCY_PREFIX):
        return None
    candidate = reference[len(FILE_DEPENDENCY_PREFIX):]
    return candidate if is_valid_uuid(candidate) else None


def normalize_timestamp(raw: Any) -> int:
    """Convert an epoch number, date(time) or date string into an integer timestamp.

    Naive values are taken as UTC. Unparseable values yield 0.
    """
    if raw is None or raw == "":
        return 0
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, (int, float)):
        return int(raw)
    if isinstance(raw, datetime):
        parsed = raw
    elif isinstance(raw, date):
        # YAML loads bare dates (2024-01-15) as date objects
        parsed = datetime(raw.year, raw.month, raw.day)
    else:
        text = str(raw).strip()
        if text.isdigit():
            return int(text)
        try:
            parsed = dateutil_parser.parse(text)
        except (ValueError, OverflowError, TypeError):
            logger.warning("Unparseable file timestamp %r — using 0", raw)
            return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp())


class FileRegistry:
    """Lookup of managed file assets by uuid."""

    def __init__(self, assets: Optional[List[FileAsset]] = None) -> None:
        self._assets: Dict[str, FileAsset] = {}
        for asset in assets or []:
            self.add(asset)

    def add(self, asset: FileAsset) -> None:
        if not is_valid_uuid(asset.uuid):
            raise ValueError(f"File asset uuid is not a valid UUID: {asset.uuid!r}")
        self._assets[asset.uuid] = asset

    def load(self, file_uuid: str) -> Optional[FileAsset]:
        """Return the asset with this uuid, or None."""
        return self._assets.get(file_uuid)

    def all(self) -> List[FileAsset]:
        return [self._assets[k] for k in sorted(self._assets)]

    def __len__(self) -> int:
        return len(self._assets)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "FileRegistry":
        """Load a registry file. A missing file yields an empty registry."""
        path = Path(path)
        if not path.exists():
            logger.info("File registry %s not found — no managed files", path)
            return cls()

        with open(path, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f) or {}

        rows = doc.get("files", []) if isinstance(doc, dict) else doc
        base_dir = path.parent
        assets: List[FileAsset] = []
        for row in rows or []:
            row = dict(row)
            file_uuid = str(row.pop("uuid", ""))
            uri = str(row.pop("uri", ""))
            if uri and not os.path.isabs(uri):
                uri = str(base_dir / uri)
            filename = str(row.pop("filename", "") or os.path.basename(uri))
            created = normalize_timestamp(row.pop("created", None))
            assets.append(
                FileAsset(uuid=file_uuid, filename=filename, uri=uri, created=created, fields=row)
            )

        logger.debug("Loaded %d managed files from %s", len(assets), path)
        return cls(assets)
