# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Host Adapter

Drives the boundary protocol from the host side: copy the archive into the
module's memory, run the listing, decode the JSON result and release every
buffer that crossed the boundary.

Usage:
    from zipcheck.core.zchost import ZipCheckHost

    host = ZipCheckHost()
    for entry in host.load_zip_entries("/path/to/archive.zip"):
        print(entry.path)
"""

import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

from zipcheck.core import zcconst
from zipcheck.core.zcboundary import ZipCheckModule
from zipcheck.core.zcerror import ArchiveReadError
from zipcheck.core.zcscan import ZipEntry, deserialize_entries

logger = logging.getLogger(__name__)


@dataclass
class ListingSummary:
    """Entry counts for one listing."""

    total: int = 0
    files: int = 0
    directories: int = 0
    encrypted: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "files": self.files,
            "directories": self.directories,
            "encrypted": self.encrypted,
        }


def is_metadata_entry(entry: ZipEntry) -> bool:
    """Check if the entry is a macOS resource fork (__MACOSX/...)."""
    return entry.path.startswith(zcconst.MACOS_METADATA_PREFIX)


def filter_entries(
    entries: Iterable[ZipEntry],
    include_directories: bool = False,
    include_metadata: bool = False,
) -> List[ZipEntry]:
    """Drop directory and __MACOSX entries unless asked to keep them."""
    return [
        e
        for e in entries
        if (include_directories or e.is_file) and (include_metadata or not is_metadata_entry(e))
    ]


def summarize(entries: Iterable[ZipEntry]) -> ListingSummary:
    summary = ListingSummary()
    for entry in entries:
        summary.total += 1
        if entry.is_file:
            summary.files += 1
        else:
            summary.directories += 1
        if entry.is_encrypted:
            summary.encrypted += 1
    return summary


class ZipCheckHost:
    """Host side of the boundary protocol."""

    def __init__(self, module: Optional[ZipCheckModule] = None) -> None:
        self.module = module or ZipCheckModule()

    def list_entries(self, data: bytes) -> List[ZipEntry]:
        """List every entry of an in-memory archive (no filtering).

        Args:
            data: Raw archive bytes

        Returns:
            Entries in file order
        """
        exports = self.module.exports
        memory = self.module.memory

        ptr = exports["alloc"](len(data))
        try:
            memory.write(ptr, data)
            result = exports["list_zip_entries"](ptr, len(data))
            try:
                json_ptr, json_len = self.module.read_descriptor(result)
                try:
                    payload = memory.read(json_ptr, json_len)
                finally:
                    exports["free"](json_ptr, json_len)
            finally:
                exports["free_json_result"](result)
        finally:
            exports["free"](ptr, len(data))

        return deserialize_entries(payload)

    def load_zip_entries(self, path: str, include_all: bool = False) -> List[ZipEntry]:
        """List an archive file the way the viewer shows it.

        Directories and __MACOSX entries are dropped unless include_all.

        Args:
            path: Path to the archive file
            include_all: Keep directory and __MACOSX entries

        Returns:
            Entries in file order

        Raises:
            ArchiveReadError: The file could not be read
        """
        try:
            with open(path, "rb") as fp:
                data = fp.read()
        except OSError as e:
            logger.error("Failed to read archive %s: %s", path, e)
            raise ArchiveReadError(f"Cannot read archive: {path}") from e

        entries = self.list_entries(data)
        logger.debug("%s: %d entries", os.path.basename(path), len(entries))

        if include_all:
            return entries
        return filter_entries(entries)
