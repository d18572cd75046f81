"""packexport — Batched configuration package export engine.

Public API surface:
    - ExportConfig: Runtime configuration
    - ExportScope: Full or named-package selection
    - ExportOrchestrator: Resolve, plan and write an archive batch by batch
    - run_export: Convenience entry point for a one-shot archive export
    - encode_record: Deterministic YAML encoding of one configuration record
"""

__version__ = "1.0.0"
__author__ = "packexport Contributors"

from config.settings import ExportConfig
from packexport.io.encoder import encode_record
from packexport.models.entries import ExportScope
from packexport.pipeline import ExportOrchestrator, run_export

__all__ = [
    "__version__",
    "ExportConfig",
    "ExportOrchestrator",
    "ExportScope",
    "encode_record",
    "run_export",
]
