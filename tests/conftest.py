# -*- coding:utf-8 -*-

import io
import struct
import zipfile

import pytest

from zipcheck.core import zcconst


def local_header(name, flag=0, extra=b"", data=b"", name_len=None):
    """Build one local file header followed by its name, extra field and data."""
    if isinstance(name, str):
        name = name.encode("utf-8")
    header = struct.pack(
        "<4sHHHHHIIIHH",
        zcconst.LOCAL_FILE_HEADER_SIGNATURE,
        20,  # version needed
        flag,
        0,  # stored
        0,  # mod time
        0,  # mod date
        0,  # crc-32
        len(data),
        len(data),
        len(name) if name_len is None else name_len,
        len(extra),
    )
    return header + name + extra + data


@pytest.fixture
def build_header():
    return local_header


@pytest.fixture
def sample_zip():
    """A real archive written by the zipfile module."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_STORED) as zf:
        zf.writestr("docs/", b"")
        zf.writestr("docs/readme.txt", b"hello")
        zf.writestr("__MACOSX/docs/._readme.txt", b"fork")
        zf.writestr("data.bin", b"\x00\x01\x02")
    return buf.getvalue()


@pytest.fixture
def sample_zip_path(tmp_path, sample_zip):
    path = tmp_path / "sample.zip"
    path.write_bytes(sample_zip)
    return str(path)
