"""On-disk persistence helpers for packexport.

Every text file packexport writes outside an archive (flat-file records,
the flat-file file index, the generation state store) goes through
atomic_write_text(), so a reader never observes a half-written file.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from config.defaults import JSON_INDENT

logger = logging.getLogger(__name__)


class _ExportEncoder(json.JSONEncoder):
    """Encode dataclass results (summaries, statuses) and paths."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Path):
            return str(obj)
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return dataclasses.asdict(obj)
        return super().default(obj)


def dumps_pretty(data: Any, indent: int = JSON_INDENT) -> str:
    """Indented, unicode-preserving JSON text; also used for the archive index."""
    return json.dumps(data, indent=indent, ensure_ascii=False, cls=_ExportEncoder)


def atomic_write_text(path: str | Path, text: str) -> Path:
    """Replace path with text via a sibling temp file and os.replace().

    Parent directories are created as needed. On failure the temp file is
    removed and the previous content of path, if any, is left untouched.

    Returns:
        The written path.
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, target)
    except OSError as exc:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        logger.error("Could not write %s: %s", target, exc)
        raise

    logger.debug("Wrote %s (%d chars)", target, len(text))
    return target


def save_json(data: Any, path: str | Path, indent: int = JSON_INDENT) -> None:
    """Serialize data with dumps_pretty() and write it atomically.

    Raises:
        TypeError: If data holds a value JSON cannot encode; nothing is written.
    """
    atomic_write_text(path, dumps_pretty(data, indent=indent))


def load_json(path: str | Path) -> Optional[Any]:
    """Parse a JSON file, or return None if it is missing or unreadable."""
    source = Path(path)
    if not source.is_file():
        return None
    try:
        with open(source, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except (ValueError, OSError) as exc:
        logger.warning("Ignoring unreadable JSON file %s: %s", source, exc)
        return None
