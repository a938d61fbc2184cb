import pytest
from fastapi.testclient import TestClient

from prism_ingest.main import app
from prism_ingest.routers import config as config_router
from prism_ingest.routers import dependencies
from prism_ingest.routers import status as status_router


@pytest.fixture
def client(tmp_path, monkeypatch):
    watch = tmp_path / "watch"
    watch.mkdir()
    monkeypatch.setattr(dependencies, "DATABASE_TYPE", "memory")
    monkeypatch.setattr(dependencies, "ANALYZER_TYPE", "mock")
    monkeypatch.setattr(dependencies, "WATCH_FOLDER", str(watch))
    monkeypatch.setattr(dependencies, "EMAIL_FOLDER", "")
    monkeypatch.setattr(config_router, "EMAIL_FOLDER", "")
    monkeypatch.setattr(status_router, "EMAIL_FOLDER", "")
    monkeypatch.setattr(dependencies, "DEAD_LETTER_PATH", str(tmp_path / "dead_letter.jsonl"))
    monkeypatch.setattr(dependencies, "QUARANTINE_PATH", str(tmp_path / "quarantine.json"))
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_status(client, tmp_path):
    (tmp_path / "watch" / "call.txt").write_text("Hello world")
    (tmp_path / "watch" / "photo.png").write_bytes(b"\x89PNG")
    
    response = client.get("/api/status")
    
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["watch_folder"]["exists"] is True
    assert data["watch_folder"]["file_count"] == 1
    assert data["email_folder"]["folder"] is None
    assert data["watchers"]["watchers"]["transcripts"]["running"] is True
    assert data["record_count"] == 0
    assert data["analysis"]["worker_count"] >= 1


def test_get_watch_folder(client, tmp_path):
    data = client.get("/api/config/watch-folder").json()
    assert data["folder"] == str((tmp_path / "watch").resolve())
    assert data["running"] is True


def test_update_watch_folder(client, tmp_path):
    other = tmp_path / "other"
    other.mkdir()
    
    response = client.put("/api/config/watch-folder", json={"watch_folder": str(other)})
    
    assert response.status_code == 200
    assert response.json()["folder"] == str(other.resolve())
    assert client.get("/api/config/watch-folder").json()["folder"] == str(other.resolve())


def test_update_watch_folder_rejects_missing_folder(client, tmp_path):
    response = client.put("/api/config/watch-folder", json={"watch_folder": str(tmp_path / "nope")})
    assert response.status_code == 400
    assert "does not exist" in response.json()["detail"]


def test_update_watch_folder_rejects_file(client, tmp_path):
    path = tmp_path / "file.txt"
    path.write_text("x")
    response = client.put("/api/config/watch-folder", json={"watch_folder": str(path)})
    assert response.status_code == 400


def test_email_folder_can_be_enabled(client, tmp_path):
    inbox = tmp_path / "inbox"
    inbox.mkdir()
    assert client.get("/api/config/email-folder").json()["running"] is False
    
    response = client.put("/api/config/email-folder", json={"email_folder": str(inbox)})
    
    assert response.status_code == 200
    assert response.json() == {"role": "email", "folder": str(inbox.resolve()), "running": True}


def test_import_folder(client, tmp_path):
    folder = tmp_path / "backlog"
    folder.mkdir()
    (folder / "a.txt").write_text("alpha")
    (folder / "b.md").write_text("beta")
    (folder / "c.txt").write_text("   ")
    
    first = client.post("/api/import", json={"folder": str(folder)}).json()
    second = client.post("/api/import", json={"folder": str(folder)}).json()
    
    assert first["total_files"] == 3
    assert first["created"] == 2
    assert first["skipped"] == 1
    assert len(first["record_ids"]) == 2
    assert second["created"] == 0
    assert second["duplicates"] == 2
    assert client.get("/api/status").json()["record_count"] == 2


def test_import_rejects_missing_folder(client, tmp_path):
    response = client.post("/api/import", json={"folder": str(tmp_path / "nope")})
    assert response.status_code == 400


def test_quarantine_retry_with_nothing_due(client):
    response = client.post("/api/quarantine/retry")
    assert response.status_code == 200
    assert response.json()["total_files"] == 0
