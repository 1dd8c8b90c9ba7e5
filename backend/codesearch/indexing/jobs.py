"""Project indexing job: chunk sync followed by embedding backfill."""

from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from ..config import load_config
from ..core import Embedder, IndexStats, make_embedder
from ..errors import StoreError
from ..storage import SqlChunkStore
from ..web.models import Project
from .embeddings import DEFAULT_BATCH_SIZE, generate_embeddings
from .indexer import IncrementalIndexer

logger = logging.getLogger(__name__)

DEFAULT_ATTEMPTS = 3


def index_project(
    session_factory: Callable[[], Session],
    project_id: int,
    embedder: Optional[Embedder] = None,
    cfg: Optional[Dict] = None,
) -> Optional[IndexStats]:
    """Index a project's repository and record the outcome on the project row.

    Returns ``None`` when the project does not exist. Indexing errors mark the
    project as ``error`` and are re-raised.
    """
    cfg = cfg or load_config()
    db = session_factory()
    try:
        project = db.query(Project).filter(Project.id == project_id).first()
        if not project:
            logger.warning(f"Project {project_id} not found, nothing to index")
            return None

        project.status = "indexing"
        project.error_message = None
        db.commit()

        store = SqlChunkStore(db)
        try:
            stats = _index_with_retry(store, project.id, Path(project.repo_path), cfg)

            # Generate embeddings for newly indexed chunks (when a provider is configured)
            emb = embedder or make_embedder(cfg)
            batch_size = int(cfg.get("embedding", {}).get("batch_size", DEFAULT_BATCH_SIZE))
            generate_embeddings(store, emb, project.id, batch_size=batch_size)

            project.status = "indexed"
            project.total_chunks = store.count(project.id)
            project.last_indexed_at = _dt.datetime.now(_dt.timezone.utc)
            project.error_message = None
            db.commit()
            logger.info(f"Project {project.id} ({project.name}) indexed: {stats.as_dict()}")
            return stats
        except Exception as e:
            db.rollback()
            project.status = "error"
            project.error_message = str(e)
            db.commit()
            logger.error(f"Error indexing project {project_id}: {e}")
            raise
    finally:
        db.close()


def _index_with_retry(store: SqlChunkStore, project_id: int, root: Path, cfg: Dict) -> IndexStats:
    """Run the indexer, retrying store failures up to ``index_attempts`` times.

    Each attempt is a full re-run; earlier attempts never pruned anything, so
    chunks written before the failure are simply found unchanged.
    """
    attempts = max(1, int(cfg.get("index_attempts", DEFAULT_ATTEMPTS)))
    for attempt in range(1, attempts + 1):
        try:
            return IncrementalIndexer(store, cfg).index(project_id, root)
        except StoreError as e:
            if attempt == attempts:
                raise
            logger.warning(f"Indexing project {project_id} failed (attempt {attempt}/{attempts}), retrying: {e}")
