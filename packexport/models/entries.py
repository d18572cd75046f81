"""Entry, scope and batch data models for packexport.

An Entry is the unit of export: a configuration record name or a managed
file uuid. Batches are bounded, ordered slices of entries.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class EntryKind(str, Enum):
    """Discriminator between structured configuration and binary files."""

    CONFIG = "config"
    FILE = "file"


def is_valid_uuid(value: str) -> bool:
    """Return True if value is a canonical hyphenated UUID string."""
    try:
        return str(uuid.UUID(value)) == value.lower()
    except (ValueError, AttributeError, TypeError):
        return False


@dataclass(frozen=True)
class Entry:
    """One exportable unit."""

    identifier: str
    kind: EntryKind = EntryKind.CONFIG

    @classmethod
    def config(cls, name: str) -> "Entry":
        return cls(identifier=name, kind=EntryKind.CONFIG)

    @classmethod
    def file(cls, file_uuid: str) -> "Entry":
        if not is_valid_uuid(file_uuid):
            raise ValueError(f"File entry identifier must be a UUID, got {file_uuid!r}")
        return cls(identifier=file_uuid, kind=EntryKind.FILE)

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


@dataclass(frozen=True)
class ExportScope:
    """Selection criterion for an export: one named package or everything."""

    package_id: Optional[str] = None

    @classmethod
    def full(cls) -> "ExportScope":
        return cls()

    @classmethod
    def named(cls, package_id: str) -> "ExportScope":
        if not package_id:
            raise ValueError("A named scope requires a package id")
        return cls(package_id=package_id)

    @property
    def is_full(self) -> bool:
        return self.package_id is None

    @property
    def label(self) -> str:
        return "full" if self.is_full else self.package_id


@dataclass
class Batch:
    """An ordered slice of entries processed as one unit of work.

    Attributes:
        index: Zero-based position of the batch in the plan.
        entries: Entries in planned order.
        offset: Position of the first entry in the full entry list.
        total_entries: Size of the full entry list the batch was cut from.
    """

    index: int
    entries: List[Entry] = field(default_factory=list)
    offset: int = 0
    total_entries: int = 0

    def __len__(self) -> int:
        return len(self.entries)
