"""packexport configuration package."""

from config.defaults import (
    DEFAULT_LOG_LEVEL,
    FILE_INDEX_FILENAME,
    FULL_EXPORT_LIMIT,
    PACKAGE_CONFIG_PREFIX,
    PACKAGE_RECORD_TYPE,
)
from config.settings import ExportConfig

__all__ = [
    "ExportConfig",
    "FULL_EXPORT_LIMIT",
    "FILE_INDEX_FILENAME",
    "PACKAGE_CONFIG_PREFIX",
    "PACKAGE_RECORD_TYPE",
    "DEFAULT_LOG_LEVEL",
]
