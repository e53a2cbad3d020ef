"""HTTP bridge tests with the catalog service swapped through FastAPI dependencies."""
import pytest
from fastapi.testclient import TestClient

from api.main import app, get_catalog_service
from media_catalog.media_index import InMemoryMediaIndex, SQLiteMediaIndex
from media_catalog.models import RecordKind
from media_catalog.scan_service import CatalogService

TREE_URI = "content://com.android.externalstorage.documents/tree/primary%3AMusic%2FMyTracks"


@pytest.fixture()
def client_for():
    def _client(service):
        app.dependency_overrides[get_catalog_service] = lambda: service
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


def test_health_reports_index(client_for, sqlite_index_path, normalizer):
    client = client_for(CatalogService(SQLiteMediaIndex(sqlite_index_path), normalizer))

    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["index"] == str(sqlite_index_path)
    assert body["index_present"] is True


def test_scan_music(client_for, sqlite_index_path, normalizer):
    client = client_for(CatalogService(SQLiteMediaIndex(sqlite_index_path), normalizer))

    response = client.get("/api/scan/music")
    assert response.status_code == 200
    body = response.json()
    assert len(body["tracks"]) == 3
    assert body["albums"][1]["year"] == 2019


def test_scan_music_with_links(client_for, memory_index, normalizer):
    client = client_for(CatalogService(memory_index, normalizer))

    response = client.get("/api/scan/music", params={"withLinks": "true"})
    assert response.status_code == 200
    albums = {a["id"]: a for a in response.json()["albums"]}
    assert albums["a_3"]["trackIds"] == ["t_13", "t_11"]
    assert albums["a_3"]["artistId"] == "ar_7"


def test_scan_music_failure(client_for, normalizer):
    index = InMemoryMediaIndex(failures={RecordKind.ARTISTS: OSError("provider died")})
    client = client_for(CatalogService(index, normalizer))

    response = client.get("/api/scan/music")
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to scan music: artists query failed: provider died"


def test_scan_folder(client_for, memory_index, normalizer):
    client = client_for(CatalogService(memory_index, normalizer))

    response = client.post("/api/scan/folder", json={"folderUri": TREE_URI})
    assert response.status_code == 200
    body = response.json()
    assert body["folder"] == "Music/MyTracks"
    assert [t["id"] for t in body["tracks"]] == ["t_13", "t_11"]


def test_scan_folder_breakdown(client_for, memory_index, normalizer):
    client = client_for(CatalogService(memory_index, normalizer))

    response = client.post("/api/scan/folder", json={"folderUri": TREE_URI, "withBreakdown": True})
    assert response.status_code == 200
    assert [a["name"] for a in response.json()["artists"]] == ["Low Tide"]


def test_scan_folder_missing_reference(client_for, memory_index, normalizer):
    client = client_for(CatalogService(memory_index, normalizer))

    response = client.post("/api/scan/folder", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "Folder URI is required"
    assert memory_index.queries == []


def test_scan_folder_failure(client_for, normalizer):
    index = InMemoryMediaIndex(failures={RecordKind.TRACKS: OSError("unmounted")})
    client = client_for(CatalogService(index, normalizer))

    response = client.post("/api/scan/folder", json={"folderUri": "/Music/Jazz"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Folder scan failed: tracks query failed: unmounted"
