# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Buffer Arena

This module provides the memory side of the boundary protocol:
- LinearMemory: a page-granular growable byte region addressed by offsets
- BufferArena: first-fit allocator handing out (address, length) blocks

Ownership of every block passes to the caller at allocation time. The caller
releases each block exactly once with the length it asked for. Reading or
writing a block after release, releasing it twice, or releasing it with a
different length is undefined behavior. The arena raises ArenaError when it
happens to notice, but callers must not rely on that.

Usage:
    from zipcheck.core.zcarena import BufferArena

    arena = BufferArena()
    ptr = arena.allocate(len(data))
    arena.memory.write(ptr, data)
    ...
    arena.release(ptr, len(data))
"""

import bisect
import logging
from typing import Dict, List, Optional, Tuple

from zipcheck.core import zcconst
from zipcheck.core.zcerror import ArenaError, MemoryAccessError

logger = logging.getLogger(__name__)


def _align(size: int) -> int:
    """Round size up to the allocation alignment."""
    return (size + zcconst.ALIGNMENT - 1) & ~(zcconst.ALIGNMENT - 1)


# -------------------------------------------------------------------------
# LinearMemory Class
# -------------------------------------------------------------------------
class LinearMemory:
    """Growable linear memory made of fixed-size pages."""

    def __init__(
        self,
        initial_pages: int = zcconst.DEFAULT_INITIAL_PAGES,
        max_pages: int = zcconst.DEFAULT_MAX_PAGES,
    ) -> None:
        if initial_pages < 1 or max_pages < initial_pages or max_pages > zcconst.DEFAULT_MAX_PAGES:
            raise ValueError(f"Invalid memory limits: initial={initial_pages}, max={max_pages}")

        self.max_pages: int = max_pages
        self._data: bytearray = bytearray(initial_pages * zcconst.PAGE_SIZE)

    @property
    def size(self) -> int:
        """Memory size in bytes."""
        return len(self._data)

    @property
    def pages(self) -> int:
        """Memory size in pages."""
        return len(self._data) // zcconst.PAGE_SIZE

    def grow(self, delta_pages: int) -> int:
        """Grow the memory by delta_pages.

        Args:
            delta_pages: Number of pages to add

        Returns:
            Previous size in pages

        Raises:
            MemoryError: The maximum page count would be exceeded
        """
        old_pages = self.pages
        if old_pages + delta_pages > self.max_pages:
            raise MemoryError(f"Linear memory limit reached: {old_pages} + {delta_pages} > {self.max_pages} pages")

        self._data.extend(bytes(delta_pages * zcconst.PAGE_SIZE))
        logger.debug("Linear memory grown from %d to %d pages", old_pages, self.pages)
        return old_pages

    def _check_range(self, address: int, length: int) -> None:
        if address < 0 or length < 0 or address + length > len(self._data):
            raise MemoryAccessError(f"Out of bounds access: address={address}, length={length}, size={len(self._data)}")

    def read(self, address: int, length: int) -> bytes:
        """Copy length bytes starting at address."""
        self._check_range(address, length)
        return bytes(self._data[address : address + length])

    def write(self, address: int, data: bytes) -> None:
        """Copy data into memory starting at address."""
        self._check_range(address, len(data))
        self._data[address : address + len(data)] = data


# -------------------------------------------------------------------------
# BufferArena Class
# -------------------------------------------------------------------------
class BufferArena:
    """First-fit allocator over a LinearMemory.

    Free blocks are kept sorted by address and coalesced on release, so a
    released region is reused by later allocations.
    """

    def __init__(self, memory: Optional[LinearMemory] = None) -> None:
        self.memory: LinearMemory = memory or LinearMemory()
        self._free: List[Tuple[int, int]] = [(zcconst.HEAP_BASE, self.memory.size - zcconst.HEAP_BASE)]
        self._live: Dict[int, int] = {}

    # ---------------------------------------------------------------------
    # allocate(self, size)
    # Reserve size bytes and hand them to the caller
    # Return: base address (never 0)
    # ---------------------------------------------------------------------
    def allocate(self, size: int) -> int:
        """Reserve size bytes and return their base address.

        The contents are unspecified. There is no error path for the caller:
        running out of memory raises MemoryError, which is fatal.
        """
        if size < 0:
            raise ValueError(f"Negative allocation size: {size}")

        block = _align(max(size, 1))
        address = self._take(block)
        if address is None:
            self._grow_for(block)
            address = self._take(block)
            if address is None:  # pragma: no cover
                raise MemoryError(f"Unable to allocate {size} bytes")

        self._live[address] = size
        return address

    # ---------------------------------------------------------------------
    # release(self, address, size)
    # Reclaim a block previously returned by allocate()
    # ---------------------------------------------------------------------
    def release(self, address: int, size: int) -> None:
        """Give back a block. size must equal the size passed to allocate()."""
        allocated = self._live.get(address)
        if allocated is None:
            raise ArenaError(f"Release of unknown or already released address: {address}")
        if allocated != size:
            raise ArenaError(f"Release size mismatch at {address}: allocated {allocated}, released {size}")

        del self._live[address]
        self._insert_free(address, _align(max(size, 1)))

    def release_descriptor(self, address: int) -> None:
        """Give back a result descriptor record."""
        self.release(address, zcconst.DESCRIPTOR_SIZE)

    @property
    def live_blocks(self) -> int:
        """Number of blocks currently owned by callers."""
        return len(self._live)

    def _take(self, block: int) -> Optional[int]:
        for index, (address, length) in enumerate(self._free):
            if length < block:
                continue
            if length == block:
                del self._free[index]
            else:
                self._free[index] = (address + block, length - block)
            return address
        return None

    def _grow_for(self, block: int) -> None:
        end = self.memory.size
        tail = self._free[-1][1] if self._free and sum(self._free[-1]) == end else 0
        needed = block - tail
        pages = (needed + zcconst.PAGE_SIZE - 1) // zcconst.PAGE_SIZE
        self.memory.grow(pages)
        self._insert_free(end, pages * zcconst.PAGE_SIZE)

    def _insert_free(self, address: int, length: int) -> None:
        index = bisect.bisect_left(self._free, (address, length))

        # Merge with the following block
        if index < len(self._free) and address + length == self._free[index][0]:
            length += self._free[index][1]
            del self._free[index]

        # Merge with the preceding block
        if index > 0:
            prev_address, prev_length = self._free[index - 1]
            if prev_address + prev_length == address:
                self._free[index - 1] = (prev_address, prev_length + length)
                return

        self._free.insert(index, (address, length))
