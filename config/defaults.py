"""packexport — All default values and configuration constants.

All tuneable values live here. Never hard-code magic numbers in source files.
Import constants from this module; override via ExportConfig at runtime.
"""

# ── Batch sizing ───────────────────────────────────────────────────────────────
# Entries processed per export batch. Lower this when a single batch runs
# past the host's execution time or memory budget.
FULL_EXPORT_LIMIT: int = 10

# ── Archive layout ─────────────────────────────────────────────────────────────
# Name of the index member written last into every finalized archive, and of
# the index file written next to exported files in flat-file exports
FILE_INDEX_FILENAME: str = "package_files.json"

# Archive filename suffix appended to the normalized site name
ARCHIVE_SUFFIX: str = ".tar.gz"

# Extension of every exported configuration record
CONFIG_EXTENSION: str = "yml"

# ── Configuration naming ───────────────────────────────────────────────────────
# Declared record type of package definitions; their `settings` field holds JSON
PACKAGE_RECORD_TYPE: str = "sync_package"

# Config name prefix of package definitions (followed by the package id)
PACKAGE_CONFIG_PREFIX: str = "sync.package."

# Prefix of file references listed under a record's `dependencies.content`
FILE_DEPENDENCY_PREFIX: str = "file:file:"

# Record fields that hold serialized JSON and are pretty-printed on export
JSON_STRING_FIELDS: tuple = ("json_values", "json_mapper")

# Indentation used when pretty-printing embedded JSON
JSON_INDENT: int = 2

# Indentation used for exported YAML
YAML_INDENT: int = 2

# ── Site ──────────────────────────────────────────────────────────────────────
DEFAULT_SITE_NAME: str = "site"

# Source configuration directory (one <name>.yml per record)
CONFIG_DIR: str = "config/active"

# Managed-file registry describing the site's binary assets
FILE_REGISTRY: str = "config/files.yml"

# ── State ─────────────────────────────────────────────────────────────────────
# JSON key/value file holding the generation flags of the archive artifact
STATE_FILENAME: str = "packexport_state.json"

# State keys
STATE_KEY_GENERATED: str = "packexport.package_export_file_generated"
STATE_KEY_IN_PROGRESS: str = "packexport.package_export_in_progress"

# ── Logging ────────────────────────────────────────────────────────────────────
DEFAULT_LOG_LEVEL: str = "INFO"
