"""Export run orchestration data models for packexport.

Defines ExportState (the run state machine), PhaseRecord (per-phase timing
log) and RunState, the explicit state object owned by the orchestrator and
threaded through every batch step of one run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from packexport.exceptions import InvalidStateTransition
from packexport.models.entries import Batch, Entry, ExportScope
from packexport.models.export import ExportIndex


class ExportState(str, Enum):
    IDLE = "IDLE"
    RESOLVING = "RESOLVING"
    PLANNING = "PLANNING"
    WRITING = "WRITING"
    FINALIZING = "FINALIZING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


_TRANSITIONS: Dict[ExportState, FrozenSet[ExportState]] = {
    ExportState.IDLE: frozenset({ExportState.RESOLVING}),
    ExportState.RESOLVING: frozenset({ExportState.PLANNING, ExportState.FAILED}),
    ExportState.PLANNING: frozenset({ExportState.WRITING}),
    # WRITING -> WRITING is the move from one batch to the next
    ExportState.WRITING: frozenset(
        {ExportState.WRITING, ExportState.FINALIZING, ExportState.FAILED}
    ),
    ExportState.FINALIZING: frozenset({ExportState.COMPLETE, ExportState.FAILED}),
    ExportState.COMPLETE: frozenset(),
    ExportState.FAILED: frozenset(),
}


@dataclass
class PhaseRecord:
    """One timed step of a run: resolve, plan, open, batch_<n> or finalize.

    ``status`` is ``"RUNNING"`` until the phase is closed, then ``"OK"`` or
    ``"FAILED"``. An open phase reports zero elapsed time.
    """

    phase_name: str
    start_time: datetime
    end_time: Optional[datetime] = None
    status: str = "RUNNING"

    def close(self, status: str = "OK") -> None:
        self.end_time = datetime.utcnow()
        self.status = status

    @property
    def elapsed_seconds(self) -> float:
        if not self.end_time:
            return 0.0
        delta = self.end_time - self.start_time
        return delta.total_seconds()


@dataclass
class RunState:
    """State shared across the batches of one export run.

    A RunState is created by ExportOrchestrator.start() and never reused:
    a Failed or Complete run cannot be resumed.
    """

    run_id: str
    scope: ExportScope
    destination: Path
    chunk_size: int

    state: ExportState = ExportState.IDLE
    entries: List[Entry] = field(default_factory=list)
    batches: List[Batch] = field(default_factory=list)
    next_batch: int = 0

    # Open ArchiveWriter; created by start() once the plan exists
    handle: Optional[Any] = None

    index: ExportIndex = field(default_factory=dict)
    config_count: int = 0
    file_count: int = 0
    skipped_count: int = 0
    messages: List[str] = field(default_factory=list)

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    phase_log: List[PhaseRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.state in (ExportState.COMPLETE, ExportState.FAILED)

    @property
    def batches_remaining(self) -> int:
        return len(self.batches) - self.next_batch

    def transition(self, target: ExportState) -> None:
        """Move the run to target, rejecting moves the state machine forbids."""
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(
                f"Run {self.run_id}: cannot move from {self.state.value} to {target.value}"
            )
        self.state = target

    def log_phase_start(self, phase_name: str) -> PhaseRecord:
        """Open a timed phase and append it to phase_log."""
        self.phase_log.append(PhaseRecord(phase_name, datetime.utcnow()))
        return self.phase_log[-1]

    def log_phase_end(self, record: PhaseRecord, status: str = "OK") -> None:
        record.close(status)

    def add_warning(self, message: str) -> None:
        """Note a non-fatal problem, e.g. a record that vanished mid-run."""
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        """Note why the run failed or was aborted."""
        self.errors.append(message)
