"""Shared test fixtures for codesearch testing."""

from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from codesearch.config import load_config
from codesearch.core import ChunkRecord, Embedder
from codesearch.storage import SqlChunkStore
from codesearch.utils import content_sha256
from codesearch.web.database import Base
from codesearch.web.models import Project


class FakeEmbedder(Embedder):
    """Deterministic embedder returning canned vectors keyed by text."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, default: Optional[List[float]] = None):
        self.vectors = vectors or {}
        self.default = default
        self.calls: List[str] = []

    def _embed(self, text: str) -> List[float]:
        self.calls.append(text)
        return self.vectors.get(text, self.default)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db) -> SqlChunkStore:
    return SqlChunkStore(db)


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """Empty repository directory."""
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def write_file(repo: Path) -> Callable[[str, str], Path]:
    """Write a text file relative to the repository root."""

    def _write(rel: str, content: str) -> Path:
        path = repo / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_project(db, repo) -> Callable[..., Project]:
    def _make(name: str = "demo", repo_path: Optional[Path] = None) -> Project:
        project = Project(
            name=name,
            repo_path=str(repo_path or repo),
            status="pending",
            total_chunks=0,
        )
        db.add(project)
        db.commit()
        db.refresh(project)
        return project

    return _make


@pytest.fixture
def project(make_project) -> Project:
    return make_project()


@pytest.fixture
def cfg() -> Dict:
    return load_config()


@pytest.fixture
def add_chunk(store) -> Callable[..., ChunkRecord]:
    """Insert a chunk directly into the store."""

    def _add(
        project_id: int,
        file_path: str,
        content: str,
        identifier: Optional[str] = None,
        chunk_type: str = "file",
        start_line: int = 1,
        embedding: Optional[List[float]] = None,
        language: str = "python",
    ) -> ChunkRecord:
        return store.upsert(
            ChunkRecord(
                project_id=project_id,
                file_path=file_path,
                chunk_type=chunk_type,
                identifier=identifier if identifier is not None else Path(file_path).name,
                content=content,
                content_hash=content_sha256(content),
                language=language,
                start_line=start_line,
                end_line=start_line + content.count("\n"),
                embedding=embedding,
            )
        )

    return _add


@pytest.fixture
def fake_embedder():
    """Factory for :class:`FakeEmbedder` instances."""
    return FakeEmbedder
