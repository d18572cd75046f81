"""packexport — ExportConfig and environment-based configuration loading.

All runtime configuration flows through ExportConfig. Paths and site details
come from environment variables (optionally via a .env file) or explicit
keyword arguments.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from config.defaults import (
    CONFIG_DIR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_SITE_NAME,
    FILE_REGISTRY,
    FULL_EXPORT_LIMIT,
    STATE_FILENAME,
)

# Load .env file if present; silently skip if missing
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_disabled_types() -> Dict[str, bool]:
    """Parse PACKEXPORT_DISABLED_TYPES (comma-separated type ids)."""
    raw = os.getenv("PACKEXPORT_DISABLED_TYPES", "")
    return {t.strip(): False for t in raw.split(",") if t.strip()}


@dataclass
class ExportConfig:
    """Single configuration object shared by the export engine, artifact
    manager and CLI.
    """

    # ── Site ───────────────────────────────────────────────────────────────────
    site_name: str = field(
        default_factory=lambda: os.getenv("PACKEXPORT_SITE_NAME", DEFAULT_SITE_NAME)
    )

    # ── Sources ───────────────────────────────────────────────────────────────
    config_dir: str = field(
        default_factory=lambda: os.getenv("PACKEXPORT_CONFIG_DIR", CONFIG_DIR)
    )
    file_registry: str = field(
        default_factory=lambda: os.getenv("PACKEXPORT_FILE_REGISTRY", FILE_REGISTRY)
    )

    # ── Destinations ──────────────────────────────────────────────────────────
    # Default flat-file export directory; None means "must be given explicitly"
    sync_dir: Optional[str] = field(default_factory=lambda: os.getenv("PACKEXPORT_SYNC_DIR"))
    temporary_dir: str = field(
        default_factory=lambda: os.getenv("PACKEXPORT_TMP_DIR", tempfile.gettempdir())
    )
    state_path: Optional[str] = field(default_factory=lambda: os.getenv("PACKEXPORT_STATE_PATH"))

    # ── Batching and policy ───────────────────────────────────────────────────
    full_export_limit: int = field(
        default_factory=lambda: _env_int("PACKEXPORT_FULL_EXPORT_LIMIT", FULL_EXPORT_LIMIT)
    )
    # type id -> enabled; disabled ids are excluded from full exports
    enabled_entity_types: Dict[str, bool] = field(default_factory=_env_disabled_types)

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = field(
        default_factory=lambda: os.getenv("PACKEXPORT_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    )

    def __post_init__(self) -> None:
        if self.full_export_limit < 1:
            raise ValueError(
                f"full_export_limit must be a positive integer, got {self.full_export_limit}"
            )
        if self.state_path is None:
            self.state_path = str(Path(self.temporary_dir) / STATE_FILENAME)

    def excluded_entity_types(self) -> List[str]:
        """Return the sorted type ids disabled in enabled_entity_types."""
        return sorted(t for t, enabled in self.enabled_entity_types.items() if not enabled)
