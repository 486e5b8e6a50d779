# -*- coding:utf-8 -*-
# ZipCheck - ZIP entry listing engine

"""
ZipCheck Constants

ZIP local file header layout (APPNOTE.TXT 4.3.7):
- Bytes 0-3:   Signature (0x04034b50, "PK\\x03\\x04")
- Bytes 4-5:   Version needed to extract
- Bytes 6-7:   General purpose bit flag
- Bytes 8-9:   Compression method
- Bytes 10-13: Last mod file time / date
- Bytes 14-17: CRC-32
- Bytes 18-21: Compressed size
- Bytes 22-25: Uncompressed size
- Bytes 26-27: File name length
- Bytes 28-29: Extra field length
- Bytes 30-:   File name, then extra field
"""

# Local file header
LOCAL_FILE_HEADER_SIGNATURE: bytes = b"PK\x03\x04"
LOCAL_FILE_HEADER_SIZE: int = 30
FLAG_OFFSET: int = 6
NAME_LENGTH_OFFSET: int = 26  # followed by the extra field length at 28

# General purpose bit flag
FLAG_ENCRYPTED: int = 0x0001
FLAG_UTF8: int = 0x0800

# Entry name decoding
DEFAULT_NAME_ENCODING: str = "cp932"  # Windows-31J; errors and PUA singles fixed up in zcscan
NAME_DECODE_ERRORS: str = "zipcheck.shift_jis_replace"
SHIFT_JIS_LEAD_BYTES = frozenset(range(0x81, 0xA0)) | frozenset(range(0xE0, 0xFD))
# cp932 maps the single bytes 0xA0, 0xFD-0xFF here; Shift_JIS has no such characters
CP932_SINGLE_BYTE_PUA = range(0xF8F0, 0xF8F4)
INVALID_UTF8_PLACEHOLDER: str = "[invalid utf8]"
DIRECTORY_SEPARATOR: str = "/"
MACOS_METADATA_PREFIX: str = "__MACOSX"

# Linear memory
PAGE_SIZE: int = 64 * 1024
DEFAULT_INITIAL_PAGES: int = 1
DEFAULT_MAX_PAGES: int = 65536  # 4GB, the wasm32 address space
ALIGNMENT: int = 8
HEAP_BASE: int = ALIGNMENT  # address 0 is never handed out

# Result descriptor: (result address, result length), wasm32 words
DESCRIPTOR_FORMAT: str = "<II"
DESCRIPTOR_SIZE: int = 8
