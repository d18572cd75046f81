"""packexport storage package.

Configuration stores (memory, directory) and the managed file registry.
Scope-restricted source views live in packexport.storage.package_storage.
"""

from packexport.storage.base import Record, StorageInterface
from packexport.storage.file_storage import FileStorage, PackageFileStorage
from packexport.storage.files import FileAsset, FileRegistry, build_file_export_entry
from packexport.storage.memory import MemoryStorage

__all__ = [
    "FileAsset",
    "FileRegistry",
    "FileStorage",
    "MemoryStorage",
    "PackageFileStorage",
    "Record",
    "StorageInterface",
    "build_file_export_entry",
]
