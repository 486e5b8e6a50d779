# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Header Scanner

This module lists ZIP entries by walking local file headers:
- Signature search over the raw archive bytes
- Entry name decoding (UTF-8 flag, Shift_JIS otherwise)
- JSON serialization of the entry list

Nothing is decompressed. The central directory is not consulted, so the
signature can also be matched inside stored or compressed entry data; such
false positives are reported as entries.
"""

import codecs
import json
import logging
import struct
from dataclasses import dataclass
from typing import Any, Dict, List

from zipcheck.core import zcconst

logger = logging.getLogger(__name__)

_PUA_TO_REPLACEMENT = {cp: "\ufffd" for cp in zcconst.CP932_SINGLE_BYTE_PUA}


def _shift_jis_replace(exc: UnicodeError):
    """Error handler matching the WHATWG Shift_JIS decoder.

    cp932 reports an unmapped double-byte sequence as a one byte error at the
    lead byte. A non-ASCII trail byte belongs to the same error and is
    consumed with it; an ASCII trail byte is decoded on its own.
    """
    if not isinstance(exc, UnicodeDecodeError):
        raise exc

    data = exc.object
    end = exc.end
    if exc.end - exc.start == 1 and data[exc.start] in zcconst.SHIFT_JIS_LEAD_BYTES:
        if end < len(data) and data[end] >= 0x80:
            end += 1
    return "\ufffd", end


codecs.register_error(zcconst.NAME_DECODE_ERRORS, _shift_jis_replace)


@dataclass(frozen=True)
class ZipEntry:
    """One archive member found by the scanner."""

    path: str
    is_file: bool
    is_encrypted: bool

    @classmethod
    def from_header(cls, path: str, flag: int) -> "ZipEntry":
        """Build an entry from its decoded name and general purpose flag."""
        return cls(
            path=path,
            is_file=not path.endswith(zcconst.DIRECTORY_SEPARATOR),
            is_encrypted=bool(flag & zcconst.FLAG_ENCRYPTED),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZipEntry":
        return cls(path=data["path"], is_file=data["is_file"], is_encrypted=data["is_encrypted"])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (field order is part of the payload format)."""
        return {
            "path": self.path,
            "is_file": self.is_file,
            "is_encrypted": self.is_encrypted,
        }


def decode_entry_name(name_bytes: bytes, flag: int) -> str:
    """Decode an entry name according to the general purpose flag.

    Bit 11 set means UTF-8; an invalid name becomes a placeholder. Without
    the bit the name is Shift_JIS, decoded lossily.

    Args:
        name_bytes: Raw file name field
        flag: General purpose bit flag

    Returns:
        Decoded name (never raises)
    """
    if flag & zcconst.FLAG_UTF8:
        try:
            return name_bytes.decode("utf-8")
        except UnicodeDecodeError:
            return zcconst.INVALID_UTF8_PLACEHOLDER

    return name_bytes.decode(zcconst.DEFAULT_NAME_ENCODING, errors=zcconst.NAME_DECODE_ERRORS).translate(
        _PUA_TO_REPLACEMENT
    )


def scan_entries(data: bytes) -> List[ZipEntry]:
    """Walk local file headers and return the entries in file order.

    A header is only considered when at least one byte follows its fixed
    30-byte part. A name running past the end of the buffer ends the scan;
    entries found before it are kept.

    Args:
        data: Raw archive bytes

    Returns:
        List of ZipEntry (possibly empty)
    """
    entries: List[ZipEntry] = []
    size = len(data)
    i = 0

    while i + zcconst.LOCAL_FILE_HEADER_SIZE < size:
        # Same positions as a byte-by-byte resync, without the Python loop
        i = data.find(zcconst.LOCAL_FILE_HEADER_SIGNATURE, i)
        if i < 0 or i + zcconst.LOCAL_FILE_HEADER_SIZE >= size:
            break

        (flag,) = struct.unpack_from("<H", data, i + zcconst.FLAG_OFFSET)
        name_len, extra_len = struct.unpack_from("<HH", data, i + zcconst.NAME_LENGTH_OFFSET)

        name_start = i + zcconst.LOCAL_FILE_HEADER_SIZE
        name_end = name_start + name_len
        if name_end > size:
            logger.debug("Truncated entry name at offset %d (needs %d bytes, have %d)", i, name_end, size)
            break

        path = decode_entry_name(bytes(data[name_start:name_end]), flag)
        entries.append(ZipEntry.from_header(path, flag))
        logger.debug("Entry at offset %d: %s (flag 0x%04x)", i, path, flag)

        i = name_end + extra_len

    return entries


def serialize_entries(entries: List[ZipEntry]) -> bytes:
    """Serialize entries as a compact UTF-8 JSON array."""
    return json.dumps(
        [entry.to_dict() for entry in entries],
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")


def deserialize_entries(payload: bytes) -> List[ZipEntry]:
    """Parse a payload produced by serialize_entries()."""
    return [ZipEntry.from_dict(item) for item in json.loads(payload.decode("utf-8"))]
