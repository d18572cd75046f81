"""Logging utilities for packexport.

YAML-based logging configuration plus a logger adapter that tags every
message with the export run id. All loggers are namespaced under
'packexport'.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional

import yaml

_NAMESPACE = "packexport"
_LOGGING_YAML = Path(__file__).resolve().parent.parent.parent / "config" / "logging.yaml"
_FALLBACK_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _apply_level(cfg: Dict[str, Any], level: str) -> None:
    """Force one level onto every configured logger and the root logger."""
    targets = list(cfg.get("loggers", {}).values())
    if "root" in cfg:
        targets.append(cfg["root"])
    for target in targets:
        target["level"] = level


def configure_logging(
    config_path: Optional[str] = None,
    log_level: Optional[str] = None,
) -> None:
    """Configure logging for a packexport process.

    Reads a dictConfig document (config/logging.yaml by default). When no
    such file exists, stderr logging is set up through basicConfig instead.

    Args:
        config_path: Alternative dictConfig YAML file.
        log_level: Level name that overrides every level in the document.
    """
    source = Path(config_path) if config_path else _LOGGING_YAML
    level = log_level.upper() if log_level else None

    if not source.is_file():
        logging.basicConfig(level=level or "INFO", format=_FALLBACK_FORMAT)
        return

    cfg = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    if level:
        _apply_level(cfg, level)
    logging.config.dictConfig(cfg)


def get_logger(name: str) -> logging.Logger:
    """Return ``name`` as a child of the packexport logger."""
    if name == _NAMESPACE or name.startswith(_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_NAMESPACE}.{name}")


class RunContextAdapter(logging.LoggerAdapter):
    """Prefix each message with ``[run_id]``.

    Usage:
        log = get_run_logger("pipeline", run_id="20240115_120000_full")
        log.info("Batch 1 written")
        # packexport.pipeline: [20240115_120000_full] Batch 1 written
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        return "[%s] %s" % (self.extra["run_id"], msg), kwargs


def get_run_logger(name: str, run_id: str) -> RunContextAdapter:
    return RunContextAdapter(get_logger(name), {"run_id": run_id})
