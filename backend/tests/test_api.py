"""Tests for the HTTP API."""

import shutil

import pytest
from fastapi.testclient import TestClient

from codesearch.core import NullEmbedder
from codesearch.web.app import app
from codesearch.web.database import get_db, get_session_factory
from codesearch.web.deps import get_config, get_embedder
from codesearch.web.models import Project
from codesearch.web.routes.indexing import indexing_progress


@pytest.fixture
def client(session_factory, cfg):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_embedder] = lambda: NullEmbedder()
    app.dependency_overrides[get_config] = lambda: cfg
    indexing_progress.clear()

    yield TestClient(app)

    app.dependency_overrides.clear()
    indexing_progress.clear()


def _mark_indexing(session_factory, project_id):
    db = session_factory()
    try:
        db.query(Project).filter(Project.id == project_id).update({"status": "indexing"})
        db.commit()
    finally:
        db.close()


@pytest.fixture
def created(client, repo, write_file):
    write_file("app/session.py", "def login(user):\n    return authenticate(user)\n")
    write_file("lib/util.rb", "def util; end\n")
    response = client.post("/api/projects", json={"name": "demo", "repo_path": str(repo)})
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def indexed(client, created):
    response = client.post(f"/api/projects/{created['id']}/index")
    assert response.status_code == 202
    return created


class TestProjects:
    """Test project registration."""

    def test_create_project(self, created, repo):
        assert created["name"] == "demo"
        assert created["status"] == "pending"
        assert created["total_chunks"] == 0
        assert created["repo_path"] == str(repo.resolve())

    def test_create_with_missing_repo(self, client, tmp_path):
        response = client.post("/api/projects", json={"name": "x", "repo_path": str(tmp_path / "nope")})

        assert response.status_code == 400

    def test_duplicate_name(self, client, created, repo):
        response = client.post("/api/projects", json={"name": "demo", "repo_path": str(repo)})

        assert response.status_code == 409

    def test_list_and_get(self, client, created):
        assert [p["id"] for p in client.get("/api/projects").json()] == [created["id"]]
        assert client.get(f"/api/projects/{created['id']}").json()["name"] == "demo"

    def test_get_missing(self, client):
        assert client.get("/api/projects/404").status_code == 404

    def test_delete_removes_project(self, client, indexed):
        response = client.delete(f"/api/projects/{indexed['id']}")

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert client.get(f"/api/projects/{indexed['id']}").status_code == 404

    def test_delete_while_indexing_needs_force(self, client, created, session_factory):
        _mark_indexing(session_factory, created["id"])

        assert client.delete(f"/api/projects/{created['id']}").status_code == 409
        assert client.delete(f"/api/projects/{created['id']}?force=true").status_code == 200


class TestIndexing:
    """Test background indexing and status."""

    def test_index_then_status(self, client, indexed):
        status = client.get(f"/api/projects/{indexed['id']}/index/status").json()

        assert status["status"] == "indexed"
        assert status["total_chunks"] == 2
        assert status["last_indexed_at"] is not None
        assert status["stats"]["files_scanned"] == 2
        assert status["stats"]["chunks_created"] == 2

    def test_reindex_reports_unchanged(self, client, indexed):
        client.post(f"/api/projects/{indexed['id']}/index")

        stats = client.get(f"/api/projects/{indexed['id']}/index/status").json()["stats"]
        assert stats["chunks_unchanged"] == 2
        assert stats["chunks_created"] == 0

    def test_index_failure_sets_error(self, client, created, repo):
        shutil.rmtree(repo)

        response = client.post(f"/api/projects/{created['id']}/index")

        assert response.status_code == 202
        status = client.get(f"/api/projects/{created['id']}/index/status").json()
        assert status["status"] == "error"
        assert "does not exist" in status["error"]

    def test_stale_indexing_status_needs_force(self, client, created, session_factory):
        _mark_indexing(session_factory, created["id"])

        assert client.post(f"/api/projects/{created['id']}/index").status_code == 409

        response = client.post(f"/api/projects/{created['id']}/index?force=true")

        assert response.status_code == 202
        status = client.get(f"/api/projects/{created['id']}/index/status").json()
        assert status["status"] == "indexed"
        assert status["total_chunks"] == 2

    def test_index_missing_project(self, client):
        assert client.post("/api/projects/404/index").status_code == 404

    def test_embeddings_without_provider(self, client, indexed):
        response = client.post(f"/api/projects/{indexed['id']}/embeddings", json={"batch_size": 10})

        assert response.status_code == 200
        assert response.json() == {"generated": 0, "failed": 2}


class TestSearch:
    """Test the search endpoint."""

    def test_text_search(self, client, indexed):
        response = client.post(
            "/api/search",
            json={"query": "Authenticate user", "project_id": indexed["id"], "mode": "auto"},
        )

        assert response.status_code == 200
        [hit] = response.json()["results"]
        assert hit["file_path"] == "app/session.py"
        assert hit["chunk_type"] == "file"
        assert hit["language"] == "python"
        assert (hit["start_line"], hit["end_line"]) == (1, 2)

    def test_semantic_without_embedding_is_bad_request(self, client, indexed):
        response = client.post(
            "/api/search",
            json={"query": "login", "project_id": indexed["id"], "mode": "semantic"},
        )

        assert response.status_code == 400

    def test_invalid_mode_is_rejected(self, client, indexed):
        response = client.post(
            "/api/search",
            json={"query": "login", "project_id": indexed["id"], "mode": "fuzzy"},
        )

        assert response.status_code == 422

    def test_unknown_project(self, client):
        response = client.post("/api/search", json={"query": "login", "project_id": 404})

        assert response.status_code == 404
