"""Incremental code indexing logic."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set

from ..config import DEFAULT_CONFIG
from ..core import ChunkCandidate, ChunkRecord, DefaultChunker, IndexStats, classify
from ..core.models import ChunkKey
from ..errors import ConfigurationError, TransientFileError
from ..storage import ChunkStore
from ..utils import FileWalker, content_sha256
from .base import Indexer

logger = logging.getLogger(__name__)


def read_source(path: Path, rel: str) -> str:
    """Read a file as strict UTF-8, raising :class:`TransientFileError` on failure."""
    try:
        return path.read_bytes().decode("utf-8")
    except OSError as e:
        raise TransientFileError(rel, f"unreadable: {e}") from e
    except UnicodeDecodeError as e:
        raise TransientFileError(rel, f"invalid UTF-8: {e}") from e


def _last_per_key(candidates: List[ChunkCandidate]) -> List[ChunkCandidate]:
    # Same-key candidates in one file: the later one in scan order wins.
    by_key: Dict[tuple, ChunkCandidate] = {}
    for c in candidates:
        key = (c.chunk_type, c.identifier)
        by_key.pop(key, None)
        by_key[key] = c
    return list(by_key.values())


class IncrementalIndexer(Indexer):
    """Walks a repository and syncs its chunks into a :class:`ChunkStore`."""

    def __init__(self, store: ChunkStore, cfg: Optional[Dict] = None) -> None:
        self.store = store
        self.cfg = cfg or DEFAULT_CONFIG
        self.chunker = DefaultChunker(
            max_chunk_size=int(self.cfg.get("max_chunk_size", 10_000)),
            scan_caps=self.cfg.get("scan_caps"),
        )

    def files(self, repo: Path) -> FileWalker:
        return FileWalker(
            repo,
            allowed_extensions=self.cfg.get("indexable_extensions"),
            ignored_prefixes=self.cfg.get("ignored_prefixes"),
            max_file_size=int(self.cfg.get("max_file_size", 100_000)),
        )

    def index(self, project_id: int, repo: Path) -> IndexStats:
        repo = Path(repo)
        if not repo.is_dir():
            raise ConfigurationError(f"repo_path does not exist: {repo}")

        stats = IndexStats()
        visited_keys: Set[ChunkKey] = set()

        for fp, rel in self.files(repo):
            stats.files_scanned += 1
            try:
                content = read_source(fp, rel)
            except TransientFileError as e:
                logger.warning(f"Skipping {e}")
                continue

            language = classify(rel)
            for candidate in _last_per_key(self.chunker.chunk(content, language, rel)):
                self._sync_chunk(project_id, rel, language, candidate, stats)
                visited_keys.add((rel, candidate.chunk_type, candidate.identifier))

        # Prune only once the whole walk has completed.
        stats.chunks_removed = self.store.delete_unvisited(project_id, visited_keys)

        logger.info(f"Index complete for project {project_id}: {stats.as_dict()}")
        return stats

    def _sync_chunk(
        self,
        project_id: int,
        rel: str,
        language: str,
        candidate: ChunkCandidate,
        stats: IndexStats,
    ) -> None:
        digest = content_sha256(candidate.content)
        existing = self.store.find_by(project_id, rel, candidate.chunk_type, candidate.identifier)

        if existing is not None and existing.content_hash == digest:
            stats.chunks_unchanged += 1
            return

        self.store.upsert(
            ChunkRecord(
                id=existing.id if existing else None,
                project_id=project_id,
                file_path=rel,
                chunk_type=candidate.chunk_type,
                identifier=candidate.identifier,
                content=candidate.content,
                content_hash=digest,
                language=language,
                start_line=candidate.start_line,
                end_line=candidate.end_line,
                # Cleared so the embedding gets regenerated
                embedding=None,
            )
        )
        if existing is None:
            stats.chunks_created += 1
        else:
            stats.chunks_updated += 1


def build_index(store: ChunkStore, project_id: int, repo: Path, cfg: Optional[Dict] = None) -> IndexStats:
    """Build or update the chunk index of one project (Wrapper)."""
    indexer = IncrementalIndexer(store, cfg)
    return indexer.index(project_id, repo)
