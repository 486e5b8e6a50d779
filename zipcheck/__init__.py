# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck - ZIP Entry Lister

Lists the entries of a ZIP archive (path, file or directory, encrypted flag)
from its local file headers, without decompressing anything.

Basic Usage:
    import zipcheck

    host = zipcheck.ZipCheckHost()
    for entry in host.load_zip_entries("/path/to/archive.zip"):
        print(entry.path, entry.is_encrypted)

Boundary Protocol:
    import zipcheck

    module = zipcheck.ZipCheckModule()
    ptr = module.allocate(len(data))
    module.memory.write(ptr, data)
    desc = module.list_entries(ptr, len(data))
    json_ptr, json_len = module.read_descriptor(desc)
    payload = module.memory.read(json_ptr, json_len)  # b'[{"path":...}]'
    module.release(json_ptr, json_len)
    module.release(ptr, len(data))
    module.release_descriptor(desc)

Daemon:
    zcd --port 8312
    curl -F file=@archive.zip http://127.0.0.1:8312/list/file
"""

__version__ = "0.3"
__author__ = "ZipCheck Developers"
__last_update__ = "Mon Oct 19 00:00:00 2026 UTC"

from zipcheck.core import (
    ArchiveReadError,
    ArenaError,
    BufferArena,
    LinearMemory,
    ListingSummary,
    MemoryAccessError,
    ZipCheckError,
    ZipCheckHost,
    ZipCheckModule,
    ZipEntry,
    filter_entries,
    scan_entries,
    serialize_entries,
    summarize,
    zcconst,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__last_update__",
    # Boundary
    "ZipCheckModule",
    "BufferArena",
    "LinearMemory",
    # Scanner
    "ZipEntry",
    "scan_entries",
    "serialize_entries",
    # Host
    "ZipCheckHost",
    "ListingSummary",
    "filter_entries",
    "summarize",
    # Errors
    "ZipCheckError",
    "ArenaError",
    "MemoryAccessError",
    "ArchiveReadError",
    # Core modules
    "zcconst",
]
