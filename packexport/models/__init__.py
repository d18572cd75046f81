"""packexport data models package.

All engine inputs and outputs are defined here as typed dataclasses.
"""

from packexport.models.entries import Batch, Entry, EntryKind, ExportScope, is_valid_uuid
from packexport.models.export import (
    ArtifactStatus,
    BatchResult,
    DirectoryExportResult,
    ExportIndex,
    ExportSummary,
)
from packexport.models.pipeline import ExportState, PhaseRecord, RunState

__all__ = [
    # entries
    "Batch",
    "Entry",
    "EntryKind",
    "ExportScope",
    "is_valid_uuid",
    # export
    "ArtifactStatus",
    "BatchResult",
    "DirectoryExportResult",
    "ExportIndex",
    "ExportSummary",
    # pipeline
    "ExportState",
    "PhaseRecord",
    "RunState",
]
