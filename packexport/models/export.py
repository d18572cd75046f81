"""Export result data models for packexport.

Defines the per-batch result produced by the ArchiveWriter, the run summary
produced by the ExportOrchestrator, and the results of the flat-file export
and artifact status queries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# file dependency name -> flat field mapping
ExportIndex = Dict[str, Dict[str, Any]]


@dataclass
class BatchResult:
    """Outcome of appending one batch to the archive."""

    index: int
    processed: int = 0
    config_count: int = 0
    file_count: int = 0
    skipped: int = 0
    files: ExportIndex = field(default_factory=dict)   # partial index contribution
    message: str = ""


@dataclass
class ExportSummary:
    """Final report of an export run."""

    run_id: str
    config_count: int = 0
    file_count: int = 0
    batch_count: int = 0
    entry_count: int = 0
    artifact_path: str = ""
    status: str = "COMPLETE"   # "COMPLETE", "FAILED"
    elapsed_seconds: float = 0.0

    @property
    def message(self) -> str:
        return (
            f"Exported {self.config_count} config and {self.file_count} "
            f"non-config files in {self.batch_count} batches."
        )


@dataclass
class DirectoryExportResult:
    """Counts reported by a flat-file (directory) export."""

    config_count: int = 0
    file_count: int = 0

    @property
    def message(self) -> str:
        return f"Exported {self.config_count} config and {self.file_count} non-config files."


@dataclass
class ArtifactStatus:
    """Current state of the generated archive artifact."""

    path: str
    generated: bool = False
    in_progress: bool = False
    size_bytes: Optional[int] = None
    modified: Optional[float] = None   # POSIX mtime
