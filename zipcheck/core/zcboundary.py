# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Boundary Module

The four operations a host may call, bound to one BufferArena:

    allocate(len)            -> address       (export "alloc")
    release(ptr, len)        -> None          (export "free")
    list_entries(ptr, len)   -> descriptor    (export "list_zip_entries")
    release_descriptor(ptr)  -> None          (export "free_json_result")

A descriptor is an 8-byte record holding the address and length of the
JSON result buffer as two little-endian 32-bit words. The host owns the
descriptor and the result buffer and must release both.

Usage:
    module = ZipCheckModule()
    ptr = module.allocate(len(data))
    module.memory.write(ptr, data)
    desc = module.list_entries(ptr, len(data))
    result_ptr, result_len = module.read_descriptor(desc)
    payload = module.memory.read(result_ptr, result_len)
    module.release(result_ptr, result_len)
    module.release(ptr, len(data))
    module.release_descriptor(desc)
"""

import logging
import struct
from typing import Callable, Dict, Optional, Tuple

from zipcheck.core import zcconst
from zipcheck.core.zcarena import BufferArena, LinearMemory
from zipcheck.core.zcscan import scan_entries, serialize_entries

logger = logging.getLogger(__name__)


class ZipCheckModule:
    """Boundary operations over a private linear memory.

    An instance is not thread-safe. Scans keep no state between calls; the
    only state is the allocator.
    """

    def __init__(self, memory: Optional[LinearMemory] = None) -> None:
        self.arena = BufferArena(memory)

    @property
    def memory(self) -> LinearMemory:
        return self.arena.memory

    @property
    def exports(self) -> Dict[str, Callable]:
        """Boundary operations under their host-facing export names."""
        return {
            "alloc": self.allocate,
            "free": self.release,
            "list_zip_entries": self.list_entries,
            "free_json_result": self.release_descriptor,
        }

    def allocate(self, size: int) -> int:
        return self.arena.allocate(size)

    def release(self, address: int, size: int) -> None:
        self.arena.release(address, size)

    def release_descriptor(self, address: int) -> None:
        self.arena.release_descriptor(address)

    def list_entries(self, address: int, size: int) -> int:
        """List the ZIP entries held in [address, address + size).

        The input buffer stays owned by the caller. The returned descriptor
        and the result buffer it points to are new allocations owned by the
        caller. Malformed archives never fail; MemoryError is fatal.

        Args:
            address: Base address of the populated archive buffer
            size: Length of the archive buffer

        Returns:
            Address of the result descriptor
        """
        data = self.memory.read(address, size)
        entries = scan_entries(data)
        payload = serialize_entries(entries)
        logger.debug("Listed %d entries from %d bytes", len(entries), size)

        result_ptr = self.allocate(len(payload))
        self.memory.write(result_ptr, payload)

        descriptor = self.allocate(zcconst.DESCRIPTOR_SIZE)
        self.memory.write(descriptor, struct.pack(zcconst.DESCRIPTOR_FORMAT, result_ptr, len(payload)))
        return descriptor

    def read_descriptor(self, address: int) -> Tuple[int, int]:
        """Decode a result descriptor into (result address, result length)."""
        return read_descriptor(self.memory, address)


def read_descriptor(memory: LinearMemory, address: int) -> Tuple[int, int]:
    """Decode the descriptor record at address."""
    return struct.unpack(zcconst.DESCRIPTOR_FORMAT, memory.read(address, zcconst.DESCRIPTOR_SIZE))
