"""packexport export orchestrator.

Drives one export run through its state machine:

  Idle -> Resolving -> Planning -> Writing (batch 0..N-1) -> Finalizing -> Complete

with Failed reachable from Resolving, Writing and Finalizing. A run is
either executed in one call (run()) or step by step by an external batch
runner (start(), step() per batch, finish()); the runner must execute at
most one step of a run at a time and in planned order.

Usage:
    from packexport.pipeline import ExportOrchestrator
    from packexport.models import ExportScope

    orchestrator = ExportOrchestrator(store, files, excluded_types=["custom_style_type"])
    summary = orchestrator.run(ExportScope.full(), "/tmp/site.tar.gz", chunk_size=10)
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

from packexport.exceptions import DestinationUnresolved, ExportError
from packexport.io.archive import ArchiveWriter
from packexport.models.entries import ExportScope
from packexport.models.export import BatchResult, ExportSummary
from packexport.models.pipeline import ExportState, RunState
from packexport.planner import describe_plan, plan
from packexport.resolver import SourceResolver
from packexport.storage.base import StorageInterface
from packexport.storage.files import FileRegistry
from packexport.utils.logging_utils import get_run_logger
from packexport.utils.text import slugify

logger = logging.getLogger(__name__)


def _make_run_id(scope: ExportScope) -> str:
    """Generate a sortable run id from UTC timestamp and scope label.

    Returns:
        Run id of the form ``YYYYMMDD_HHMMSS_<scope>``.
    """
    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{slugify(scope.label)}"


class ExportOrchestrator:
    """Run exports of one configuration store into archive artifacts.

    Args:
        store: Source configuration store.
        files: Managed file registry.
        excluded_types: Type ids excluded from full exports.
    """

    def __init__(
        self,
        store: StorageInterface,
        files: Optional[FileRegistry] = None,
        excluded_types: Iterable[str] = (),
    ) -> None:
        self.store = store
        self.files = files if files is not None else FileRegistry()
        self.resolver = SourceResolver(store, files=self.files, excluded_types=excluded_types)
        # Most recent run started by this orchestrator, kept for inspection
        self.last_run: Optional[RunState] = None

    # ── One-shot execution ─────────────────────────────────────────────────────

    def run(
        self,
        scope: ExportScope,
        destination: Optional[str | Path],
        chunk_size: int,
    ) -> ExportSummary:
        """Resolve, plan, write every batch and finalize the artifact.

        Raises:
            ScopeNotFound, DestinationUnresolved: Before anything is written.
            AssetNotFound, EncodingError, DeleteFailed: The run ends Failed
                and the artifact, if created, has no index.
        """
        logger.debug("Running %s export into %s (chunk_size=%s)", scope.label, destination, chunk_size)
        run_state = self.start(scope, destination, chunk_size)
        while run_state.batches_remaining:
            self.step(run_state)
        return self.finish(run_state)

    # ── Step-wise execution ────────────────────────────────────────────────────

    def start(
        self,
        scope: ExportScope,
        destination: Optional[str | Path],
        chunk_size: int,
    ) -> RunState:
        """Create a fresh run, resolve and plan it, and open the artifact."""
        if not destination:
            raise DestinationUnresolved("No destination path provided for the export artifact.")
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")

        run_state = RunState(
            run_id=_make_run_id(scope),
            scope=scope,
            destination=Path(destination),
            chunk_size=chunk_size,
        )
        self.last_run = run_state
        run_state.start_time = datetime.utcnow()
        log = get_run_logger(__name__, run_state.run_id)

        # ── Resolving ─────────────────────────────────────────────────────────
        run_state.transition(ExportState.RESOLVING)
        record = run_state.log_phase_start("resolve")
        try:
            run_state.entries = self.resolver.resolve(scope)
        except Exception as exc:
            self._fail(run_state, record, "resolve", exc)
            raise
        run_state.log_phase_end(record)

        # ── Planning ──────────────────────────────────────────────────────────
        run_state.transition(ExportState.PLANNING)
        record = run_state.log_phase_start("plan")
        run_state.batches = plan(run_state.entries, chunk_size)
        run_state.log_phase_end(record)
        log.info(describe_plan(run_state.batches))

        # ── Writing: reset and open the artifact ──────────────────────────────
        run_state.transition(ExportState.WRITING)
        record = run_state.log_phase_start("open")
        try:
            run_state.handle = ArchiveWriter.open_or_reset(
                run_state.destination, self.store, self.files
            )
        except Exception as exc:
            self._fail(run_state, record, "open", exc)
            raise
        run_state.log_phase_end(record)
        return run_state

    def step(self, run_state: RunState) -> BatchResult:
        """Append the next planned batch to the artifact."""
        if run_state.state is not ExportState.WRITING:
            raise ExportError(
                f"Run {run_state.run_id} is {run_state.state.value}; no batch can be written"
            )
        if not run_state.batches_remaining:
            raise ExportError(f"Run {run_state.run_id} has no batches left")

        batch = run_state.batches[run_state.next_batch]
        phase = f"batch_{batch.index}"
        record = run_state.log_phase_start(phase)
        try:
            result = run_state.handle.append_batch(batch)
        except Exception as exc:
            self._fail(run_state, record, phase, exc)
            raise

        run_state.transition(ExportState.WRITING)
        run_state.index.update(result.files)
        run_state.config_count += result.config_count
        run_state.file_count += result.file_count
        run_state.skipped_count += result.skipped
        if result.skipped:
            run_state.add_warning(
                f"batch {batch.index + 1}: {result.skipped} config entries vanished before export"
            )
        run_state.messages.append(result.message)
        run_state.next_batch += 1
        run_state.log_phase_end(record)

        get_run_logger(__name__, run_state.run_id).info(
            "%s (%.2fs)", result.message, record.elapsed_seconds
        )
        return result

    def finish(self, run_state: RunState) -> ExportSummary:
        """Write the index, close the artifact and report the run."""
        if run_state.state is not ExportState.WRITING or run_state.batches_remaining:
            raise ExportError(
                f"Run {run_state.run_id} cannot be finalized: state={run_state.state.value}, "
                f"batches remaining={run_state.batches_remaining}"
            )

        run_state.transition(ExportState.FINALIZING)
        record = run_state.log_phase_start("finalize")
        try:
            run_state.handle.finalize(run_state.index)
        except Exception as exc:
            self._fail(run_state, record, "finalize", exc)
            raise
        run_state.log_phase_end(record)
        run_state.transition(ExportState.COMPLETE)
        return self._finalise(run_state)

    def abort(self, run_state: RunState, reason: str = "aborted by caller") -> None:
        """Stop a run at a batch boundary, leaving the artifact without an index."""
        if run_state.is_terminal:
            return
        run_state.add_error(reason)
        if run_state.handle is not None:
            run_state.handle.close()
        run_state.transition(ExportState.FAILED)
        self._finalise(run_state)

    # ── Internals ──────────────────────────────────────────────────────────────

    def _fail(self, run_state: RunState, record, phase: str, exc: Exception) -> None:
        run_state.log_phase_end(record, status="FAILED")
        run_state.add_error(f"{phase} failed: {exc}")
        if run_state.handle is not None:
            run_state.handle.close()
        run_state.transition(ExportState.FAILED)
        get_run_logger(__name__, run_state.run_id).error(
            "Export %s failed during %s: %s", run_state.scope.label, phase, exc
        )
        self._finalise(run_state)

    def _finalise(self, run_state: RunState) -> ExportSummary:
        """Record end time and emit a summary log line."""
        run_state.end_time = datetime.utcnow()
        elapsed = (
            (run_state.end_time - run_state.start_time).total_seconds()
            if run_state.start_time else 0.0
        )
        summary = ExportSummary(
            run_id=run_state.run_id,
            config_count=run_state.config_count,
            file_count=run_state.file_count,
            batch_count=len(run_state.batches),
            entry_count=len(run_state.entries),
            artifact_path=str(run_state.destination),
            status=run_state.state.value,
            elapsed_seconds=elapsed,
        )
        get_run_logger(__name__, run_state.run_id).info(
            "Export %s: %s | config=%d files=%d skipped=%d batches=%d in %.1fs",
            run_state.scope.label,
            summary.status,
            summary.config_count,
            summary.file_count,
            run_state.skipped_count,
            summary.batch_count,
            elapsed,
        )
        return summary


def run_export(
    store: StorageInterface,
    scope: ExportScope,
    destination: Optional[str | Path],
    chunk_size: int,
    files: Optional[FileRegistry] = None,
    excluded_types: Iterable[str] = (),
) -> ExportSummary:
    """Convenience entry point for a one-shot archive export."""
    orchestrator = ExportOrchestrator(store, files=files, excluded_types=excluded_types)
    return orchestrator.run(scope, destination, chunk_size)
