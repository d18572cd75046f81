"""packexport I/O package.

Encoding, archive writing and JSON persistence. No scope or batching
decisions are made in this layer.
"""

from packexport.io.archive import ArchiveWriter, read_archive_index, reset_artifact
from packexport.io.encoder import encode_record
from packexport.io.persistence import atomic_write_text, load_json, save_json

__all__ = [
    "ArchiveWriter",
    "atomic_write_text",
    "encode_record",
    "load_json",
    "read_archive_index",
    "reset_artifact",
    "save_json",
]
