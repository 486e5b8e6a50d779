# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Core

Buffer arena, header scanner, boundary module and host adapter.
"""

from zipcheck.core import zcconst
from zipcheck.core.zcarena import BufferArena, LinearMemory
from zipcheck.core.zcboundary import ZipCheckModule, read_descriptor
from zipcheck.core.zcerror import ArchiveReadError, ArenaError, MemoryAccessError, ZipCheckError
from zipcheck.core.zchost import ListingSummary, ZipCheckHost, filter_entries, summarize
from zipcheck.core.zcscan import ZipEntry, decode_entry_name, scan_entries, serialize_entries

__all__ = [
    "zcconst",
    "BufferArena",
    "LinearMemory",
    "ZipCheckModule",
    "read_descriptor",
    "ZipCheckError",
    "ArenaError",
    "MemoryAccessError",
    "ArchiveReadError",
    "ListingSummary",
    "ZipCheckHost",
    "filter_entries",
    "summarize",
    "ZipEntry",
    "decode_entry_name",
    "scan_entries",
    "serialize_entries",
]
