# -*- coding:utf-8 -*-

import json
import struct

import pytest

from zipcheck.core import zcconst
from zipcheck.core.zcarena import LinearMemory
from zipcheck.core.zcboundary import ZipCheckModule

from conftest import local_header


@pytest.fixture
def module():
    return ZipCheckModule()


def run_listing(module, data):
    ptr = module.allocate(len(data))
    module.memory.write(ptr, data)
    desc = module.list_entries(ptr, len(data))
    json_ptr, json_len = module.read_descriptor(desc)
    payload = module.memory.read(json_ptr, json_len)
    module.release(json_ptr, json_len)
    module.release(ptr, len(data))
    module.release_descriptor(desc)
    return payload


def test_exports_use_host_names(module):
    assert set(module.exports) == {"alloc", "free", "list_zip_entries", "free_json_result"}


def test_listing_through_boundary(module):
    data = local_header("a.txt", flag=zcconst.FLAG_UTF8, data=b"abc")
    assert run_listing(module, data) == b'[{"path":"a.txt","is_file":true,"is_encrypted":false}]'
    assert module.arena.live_blocks == 0


def test_descriptor_layout(module):
    data = local_header("dir/", flag=zcconst.FLAG_UTF8 | zcconst.FLAG_ENCRYPTED)
    ptr = module.allocate(len(data))
    module.memory.write(ptr, data)
    desc = module.list_entries(ptr, len(data))

    raw = module.memory.read(desc, zcconst.DESCRIPTOR_SIZE)
    json_ptr, json_len = struct.unpack("<II", raw)
    entries = json.loads(module.memory.read(json_ptr, json_len))
    assert entries == [{"path": "dir/", "is_file": False, "is_encrypted": True}]


def test_input_buffer_is_not_consumed(module):
    data = local_header("a.txt", flag=zcconst.FLAG_UTF8)
    ptr = module.allocate(len(data))
    module.memory.write(ptr, data)
    first = module.list_entries(ptr, len(data))
    second = module.list_entries(ptr, len(data))
    assert module.memory.read(ptr, len(data)) == data
    assert first != second


def test_results_are_fresh_allocations(module):
    data = local_header("a.txt", flag=zcconst.FLAG_UTF8)
    ptr = module.allocate(len(data))
    module.memory.write(ptr, data)
    first = module.read_descriptor(module.list_entries(ptr, len(data)))
    second = module.read_descriptor(module.list_entries(ptr, len(data)))
    assert first[0] != second[0]
    assert first[1] == second[1]


def test_empty_input(module):
    assert run_listing(module, b"") == b"[]"


def test_short_input(module):
    assert run_listing(module, b"PK\x03\x04" + b"\x00" * 20) == b"[]"


def test_idempotent_output(module, sample_zip):
    assert run_listing(module, sample_zip) == run_listing(module, sample_zip)


def test_large_archive_grows_memory(sample_zip):
    module = ZipCheckModule(LinearMemory(initial_pages=1, max_pages=64))
    data = sample_zip + b"\x00" * (2 * zcconst.PAGE_SIZE)
    payload = run_listing(module, data)
    assert len(json.loads(payload)) == 4
    assert module.memory.pages > 1


def test_out_of_memory_is_fatal():
    module = ZipCheckModule(LinearMemory(initial_pages=1, max_pages=1))
    with pytest.raises(MemoryError):
        module.allocate(2 * zcconst.PAGE_SIZE)
