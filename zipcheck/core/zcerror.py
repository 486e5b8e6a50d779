# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Exceptions
"""


class ZipCheckError(Exception):
    """Base exception for ZipCheck"""

    pass


class ArenaError(ZipCheckError):
    """Raised when a caller breaks the buffer ownership contract.

    Double release, release of an unknown address and mismatched release
    lengths are undefined behavior. The arena raises this where it notices
    them; callers must not depend on it.
    """

    pass


class MemoryAccessError(ArenaError):
    """Raised when a read or write falls outside the linear memory."""

    pass


class ArchiveReadError(ZipCheckError):
    """Raised when the host cannot read an archive file."""

    pass
