"""Generated-artifact management for packexport.

Keeps at most one archive per site in the temporary directory and serializes
its regeneration through two persisted flags:

  - in progress: set when a generation starts, cleared when it finalizes or
    when the artifact is explicitly removed
  - generated: set only after a successful finalize

A generation refuses to start while the in-progress flag is set.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from config.defaults import ARCHIVE_SUFFIX, STATE_KEY_GENERATED, STATE_KEY_IN_PROGRESS
from config.settings import ExportConfig
from packexport.exceptions import GenerationInProgress
from packexport.io.archive import reset_artifact
from packexport.io.persistence import load_json, save_json
from packexport.models.entries import ExportScope
from packexport.models.export import ArtifactStatus, ExportSummary
from packexport.pipeline import ExportOrchestrator
from packexport.utils.text import normalize_site_name

logger = logging.getLogger(__name__)


def export_filename(site_name: str) -> str:
    """Archive filename for a site, e.g. ``my-site.tar.gz``."""
    return normalize_site_name(site_name) + ARCHIVE_SUFFIX


class StateStore:
    """Small persistent key/value store backed by one JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        data = load_json(self.path)
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        save_json(data, self.path)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            save_json(data, self.path)


class ArtifactManager:
    """Generate, inspect and remove the site's export archive.

    Args:
        config: Export configuration (site name, temp dir, batch size).
        orchestrator: Orchestrator bound to the site's stores.
        state: Flag store; defaults to a StateStore at config.state_path.
        cleanup_on_failure: Remove the partial artifact when a run fails.
    """

    def __init__(
        self,
        config: ExportConfig,
        orchestrator: ExportOrchestrator,
        state: Optional[StateStore] = None,
        cleanup_on_failure: bool = True,
    ) -> None:
        self.config = config
        self.orchestrator = orchestrator
        self.state = state if state is not None else StateStore(config.state_path)
        self.cleanup_on_failure = cleanup_on_failure

    @property
    def artifact_path(self) -> Path:
        return Path(self.config.temporary_dir) / export_filename(self.config.site_name)

    def status(self) -> ArtifactStatus:
        """Describe the artifact.

        A file left without the generated flag is removed, and a generated
        flag whose file has gone is cleared.
        """
        path = self.artifact_path
        generated = bool(self.state.get(STATE_KEY_GENERATED))
        in_progress = bool(self.state.get(STATE_KEY_IN_PROGRESS))
        status = ArtifactStatus(path=str(path), in_progress=in_progress)

        if generated and path.is_file():
            stats = path.stat()
            status.generated = True
            status.size_bytes = stats.st_size
            status.modified = stats.st_mtime
        elif not in_progress:
            if generated:
                logger.info("Package file %s was removed outside packexport; clearing flag", path)
                self.state.delete(STATE_KEY_GENERATED)
            reset_artifact(path)
        return status

    def generate(
        self,
        scope: Optional[ExportScope] = None,
        chunk_size: Optional[int] = None,
    ) -> ExportSummary:
        """Regenerate the artifact.

        Raises:
            GenerationInProgress: If another generation has not finished.
            ScopeNotFound: If the package does not exist; the previous
                artifact and its flags are left as they were.
            ExportError: If a batch fails. The partial artifact is removed
                and the flags cleared first when cleanup_on_failure is set.
        """
        if chunk_size is not None and chunk_size < 1:
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")
        if self.state.get(STATE_KEY_IN_PROGRESS):
            raise GenerationInProgress(
                f"A package export of {self.artifact_path.name} is already being generated."
            )

        was_generated = bool(self.state.get(STATE_KEY_GENERATED))
        self.state.delete(STATE_KEY_GENERATED)
        self.state.set(STATE_KEY_IN_PROGRESS, True)
        self.orchestrator.last_run = None
        try:
            summary = self.orchestrator.run(
                scope or ExportScope.full(),
                self.artifact_path,
                chunk_size or self.config.full_export_limit,
            )
        except Exception as exc:
            logger.error("Package export generation failed: %s", exc)
            run_state = self.orchestrator.last_run
            if run_state is None or run_state.handle is None:
                # Failed before the artifact was touched; the previous one stays valid
                self.state.delete(STATE_KEY_IN_PROGRESS)
                if was_generated:
                    self.state.set(STATE_KEY_GENERATED, True)
            elif self.cleanup_on_failure:
                self.remove()
            raise

        self.state.delete(STATE_KEY_IN_PROGRESS)
        self.state.set(STATE_KEY_GENERATED, True)
        logger.info("Package file has been successfully generated: %s", self.artifact_path)
        return summary

    def remove(self) -> bool:
        """Delete the artifact and clear both flags.

        Returns:
            True if an artifact file was deleted.
        """
        removed = reset_artifact(self.artifact_path)
        self.state.delete(STATE_KEY_GENERATED)
        self.state.delete(STATE_KEY_IN_PROGRESS)
        if removed:
            logger.info("Package file has been successfully removed: %s", self.artifact_path)
        return removed
