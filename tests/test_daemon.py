# -*- coding:utf-8 -*-

import base64

import pytest
from fastapi.testclient import TestClient

from zipcheck import __version__
from zipcheck.daemon import config as config_module
from zipcheck.daemon.api import create_api_app
from zipcheck.daemon.auth import verify_api_key
from zipcheck.daemon.config import ZipCheckConfig, set_config
from zipcheck.daemon.service import ListingService, ListingStatus, get_service

from conftest import local_header


@pytest.fixture(autouse=True)
def fresh_daemon_state():
    set_config(ZipCheckConfig())
    ListingService._instance = None
    yield
    ListingService._instance = None
    config_module._config = None


@pytest.fixture
def client():
    with TestClient(create_api_app()) as c:
        yield c


def test_ping(client):
    response = client.get("/ping")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "pong"}


def test_version(client):
    assert client.get("/version").json()["version"] == __version__


def test_list_file_upload(client, sample_zip):
    response = client.post("/list/file", files={"file": ("sample.zip", sample_zip, "application/zip")})
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["filename"] == "sample.zip"
    assert [e["path"] for e in body["entries"]] == ["docs/readme.txt", "data.bin"]
    assert body["summary"]["files"] == 2


def test_list_file_include_all_and_hash(client, sample_zip):
    response = client.post(
        "/list/file",
        params={"include_all": "true", "include_hash": "true"},
        files={"file": ("sample.zip", sample_zip, "application/zip")},
    )
    body = response.json()
    assert len(body["entries"]) == 4
    assert len(body["sha256"]) == 64


def test_list_stream(client):
    data = local_header("secret.txt", flag=0x0801)
    response = client.post("/list/stream", json={"data": base64.b64encode(data).decode()})
    assert response.status_code == 200
    assert response.json()["entries"] == [{"path": "secret.txt", "is_file": True, "is_encrypted": True}]


def test_list_stream_invalid_base64(client):
    response = client.post("/list/stream", json={"data": "not base64!!"})
    assert response.status_code == 400


def test_list_path(client, sample_zip_path):
    response = client.post("/list/path", json={"path": sample_zip_path, "include_all": True})
    assert response.status_code == 200
    assert response.json()["summary"]["total"] == 4


def test_list_path_missing(client, tmp_path):
    response = client.post("/list/path", json={"path": str(tmp_path / "missing.zip")})
    assert response.status_code == 404


def test_upload_too_large():
    set_config(ZipCheckConfig(max_upload_size=1024))
    with TestClient(create_api_app()) as c:
        response = c.post("/list/file", files={"file": ("big.zip", b"\x00" * 2048, "application/zip")})
    assert response.status_code == 413


def test_auth_required():
    set_config(ZipCheckConfig(api_key="secret-key", require_auth=True))
    with TestClient(create_api_app()) as c:
        data = base64.b64encode(local_header("a.txt")).decode()
        assert c.post("/list/stream", json={"data": data}).status_code == 401
        assert c.post("/list/stream", json={"data": data}, headers={"X-API-Key": "wrong"}).status_code == 401
        response = c.post("/list/stream", json={"data": data}, headers={"X-API-Key": "secret-key"})
        assert response.status_code == 200
        # Health endpoints stay open
        assert c.get("/ping").status_code == 200


def test_non_ascii_api_key_is_rejected():
    set_config(ZipCheckConfig(api_key="secret-key", require_auth=True))
    assert verify_api_key("clé") is False
    assert verify_api_key("secret-key") is True
    with TestClient(create_api_app()) as c:
        data = base64.b64encode(local_header("a.txt")).decode()
        response = c.post("/list/stream", json={"data": data}, headers={"X-API-Key": "clé".encode("latin-1")})
        assert response.status_code == 401


def test_non_ascii_configured_key():
    set_config(ZipCheckConfig(api_key="clé-secrète", require_auth=True))
    assert verify_api_key("clé-secrète") is True
    assert verify_api_key("cle-secrete") is False


def test_stats_count_requests(client, sample_zip):
    client.post("/list/file", files={"file": ("sample.zip", sample_zip, "application/zip")})
    stats = client.get("/stats").json()
    assert stats["requests_total"] == 1
    assert stats["archives_listed"] == 1
    assert stats["entries_listed"] == 2


def test_stats_snapshot_is_detached():
    service = get_service()
    before = service.get_stats()
    service.list_stream(local_header("a.txt"))
    assert before.requests_total == 0
    assert service.get_stats().requests_total == 1
    assert service.get_stats() is not service.get_stats()


def test_service_reports_memory_exhaustion(sample_zip):
    set_config(ZipCheckConfig(max_memory_pages=1))
    result = get_service().list_stream(sample_zip + b"\x00" * 70000)
    assert result.status == ListingStatus.ERROR
    assert get_service().get_stats().errors == 1


def test_service_list_file_missing(tmp_path):
    result = get_service().list_file(str(tmp_path / "missing.zip"))
    assert result.status == ListingStatus.ERROR
    assert result.error_message
