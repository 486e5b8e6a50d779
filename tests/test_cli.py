# -*- coding:utf-8 -*-

import json

import pytest

from zipcheck import zcd, zcl
from zipcheck.daemon import config as config_module
from zipcheck.daemon.config import ZipCheckConfig

from conftest import local_header


@pytest.fixture
def encrypted_zip_path(tmp_path):
    data = local_header("open.txt", flag=0x0800) + local_header("locked.txt", flag=0x0801)
    path = tmp_path / "locked.zip"
    path.write_bytes(data)
    return str(path)


def test_zcl_lists_files(capsys, sample_zip_path):
    assert zcl.main(["--no-banner", sample_zip_path]) == 0
    out = capsys.readouterr().out
    assert "docs/readme.txt" in out
    assert "__MACOSX" not in out
    assert "2 file(s), 0 dir(s), 0 encrypted" in out


def test_zcl_all(capsys, sample_zip_path):
    assert zcl.main(["--no-banner", "--all", sample_zip_path]) == 0
    out = capsys.readouterr().out
    assert "__MACOSX/docs/._readme.txt" in out
    assert "3 file(s), 1 dir(s)" in out


def test_zcl_json(capsys, sample_zip_path):
    assert zcl.main(["--json", sample_zip_path]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["filename"] == sample_zip_path
    assert [e["path"] for e in result["entries"]] == ["docs/readme.txt", "data.bin"]


def test_zcl_encrypted_only(capsys, encrypted_zip_path):
    assert zcl.main(["--json", "--encrypted-only", encrypted_zip_path]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["entries"] == [{"path": "locked.txt", "is_file": True, "is_encrypted": True}]


def test_zcl_marks_encrypted_entries(encrypted_zip_path):
    entries = zcl.ZipCheckHost().load_zip_entries(encrypted_zip_path)
    assert [zcl.format_entry(e) for e in entries] == ["   open.txt", " * locked.txt"]


def test_zcl_missing_archive(capsys, tmp_path, sample_zip_path):
    missing = str(tmp_path / "missing.zip")
    assert zcl.main(["--no-banner", missing, sample_zip_path]) == 1
    out = capsys.readouterr().out
    assert "error" in out
    assert "docs/readme.txt" in out


def test_zcl_requires_paths(capsys):
    assert zcl.main(["--no-banner"]) == 1


def test_zcl_ping_requires_server(capsys):
    assert zcl.main(["--no-banner", "--ping"]) == 1


def test_zcd_args_apply_to_config():
    args = zcd.parse_args(["--port", "9000", "--max-pages", "16", "--api-key", "k", "--require-auth"])
    config = zcd.apply_args_to_config(args, ZipCheckConfig())
    assert config.http_port == 9000
    assert config.max_memory_pages == 16
    assert config.require_auth is True
    assert config.validate() == []


def test_zcd_generate_key(capsys):
    try:
        assert zcd.main(["--generate-key"]) == 0
        assert "ZC_API_KEY=" in capsys.readouterr().out
    finally:
        config_module._config = None


def test_zcd_rejects_invalid_config(capsys):
    try:
        assert zcd.main(["--require-auth"]) == 1
    finally:
        config_module._config = None
