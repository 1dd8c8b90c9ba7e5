"""Chunk search: semantic, text and hybrid ranking."""

from __future__ import annotations

import enum
import logging
import re
from typing import Dict, List, Optional, Union

from ..config import DEFAULT_CONFIG
from ..core import ChunkRecord, Embedder
from ..errors import ConfigurationError
from ..storage import ChunkStore
from .base import Searcher

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[\s,.\-_:;!?()\[\]{}<>#*/\\'\"`=+|&@$%^~]+")


class SearchMode(str, enum.Enum):
    SEMANTIC = "semantic"
    TEXT = "text"
    HYBRID = "hybrid"
    AUTO = "auto"


def parse_mode(mode: Union[str, SearchMode]) -> SearchMode:
    try:
        return SearchMode(mode)
    except ValueError:
        valid = ", ".join(m.value for m in SearchMode)
        raise ConfigurationError(f"Invalid search mode {mode!r}; expected one of: {valid}") from None


def extract_keywords(text: str, min_length: int = 3, max_keywords: int = 10) -> List[str]:
    """Split a query into lower-cased, de-duplicated keywords."""
    keywords: List[str] = []
    seen: set[str] = set()
    for word in _TOKEN_SPLIT.split(text or ""):
        word = word.lower()
        if len(word) < min_length or word in seen:
            continue
        seen.add(word)
        keywords.append(word)
        if len(keywords) >= max_keywords:
            break
    return keywords


class QueryEngine(Searcher):
    """Resolves a free-text query into a ranked, bounded list of chunks.

    ``auto`` prefers semantic search once the project has embeddings; semantic
    and hybrid requests degrade to text search when no query embedding can be
    produced, except an explicit ``semantic`` request, which is an error.
    """

    def __init__(
        self,
        store: ChunkStore,
        embedder: Optional[Embedder] = None,
        cfg: Optional[Dict] = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        search_cfg = (cfg or DEFAULT_CONFIG).get("search", {})
        self.default_limit = int(search_cfg.get("default_limit", 10))
        self.min_keyword_length = int(search_cfg.get("min_keyword_length", 3))
        self.max_keywords = int(search_cfg.get("max_keywords", 10))

    def query(
        self,
        project_id: int,
        text: str,
        mode: Union[str, SearchMode] = SearchMode.AUTO,
        limit: Optional[int] = None,
        embedding: Optional[List[float]] = None,
    ) -> List[ChunkRecord]:
        mode = parse_mode(mode)
        limit = self.default_limit if limit is None else limit
        if not isinstance(limit, int) or limit < 1:
            raise ConfigurationError(f"limit must be a positive integer, got {limit!r}")

        if not text or not text.strip():
            return []

        if mode is SearchMode.SEMANTIC:
            embedding = self._query_embedding(text, embedding)
            if embedding is None:
                raise ConfigurationError("Semantic search requires a query embedding")
            return self._semantic(project_id, embedding, limit)

        if mode is SearchMode.AUTO:
            mode = SearchMode.SEMANTIC if self.store.has_any_embedding(project_id) else SearchMode.TEXT
            logger.debug(f"Auto mode resolved to {mode.value} for project {project_id}")

        if mode is SearchMode.TEXT:
            return self._text(project_id, text, limit)

        embedding = self._query_embedding(text, embedding)
        if embedding is None:
            logger.debug(f"No query embedding, {mode.value} search falls back to text")
            return self._text(project_id, text, limit)

        if mode is SearchMode.SEMANTIC:
            return self._semantic(project_id, embedding, limit)
        return self._hybrid(project_id, text, embedding, limit)

    def _query_embedding(self, text: str, embedding: Optional[List[float]]) -> Optional[List[float]]:
        if embedding:
            return list(embedding)
        if self.embedder is None:
            return None
        return self.embedder.embed(text)

    def _semantic(self, project_id: int, embedding: List[float], limit: int) -> List[ChunkRecord]:
        return [record for _, record in self.store.nearest(project_id, embedding, limit)]

    def _text(self, project_id: int, text: str, limit: int) -> List[ChunkRecord]:
        keywords = extract_keywords(text, self.min_keyword_length, self.max_keywords)
        if not keywords:
            return []
        return self.store.search_text(project_id, keywords, limit)

    def _hybrid(self, project_id: int, text: str, embedding: List[float], limit: int) -> List[ChunkRecord]:
        merged: List[ChunkRecord] = []
        seen: set = set()
        for record in self._semantic(project_id, embedding, limit) + self._text(project_id, text, limit):
            ident = record.id if record.id is not None else record.key
            if ident in seen:
                continue
            seen.add(ident)
            merged.append(record)
        return merged[:limit]


def search(
    store: ChunkStore,
    project_id: int,
    query: str,
    mode: Union[str, SearchMode] = SearchMode.AUTO,
    limit: Optional[int] = None,
    embedding: Optional[List[float]] = None,
    embedder: Optional[Embedder] = None,
    cfg: Optional[Dict] = None,
) -> List[ChunkRecord]:
    engine = QueryEngine(store, embedder=embedder, cfg=cfg)
    return engine.query(project_id, query, mode=mode, limit=limit, embedding=embedding)

