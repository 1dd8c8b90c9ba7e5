"""Embedding backfill for indexed chunks."""

from __future__ import annotations

import logging

from ..core import Embedder, EmbeddingStats
from ..storage import ChunkStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 50


def generate_embeddings(
    store: ChunkStore,
    embedder: Embedder,
    project_id: int,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> EmbeddingStats:
    """Embed up to ``batch_size`` chunks that have no embedding yet.

    Kept apart from indexing so it can be retried and rate-limited on its own.
    A chunk whose content changed since it was read keeps a null embedding.
    """
    stats = EmbeddingStats()
    chunks = store.without_embeddings(project_id, batch_size)
    if not chunks:
        return stats

    for chunk in chunks:
        vector = embedder.embed(chunk.content)
        if vector and store.set_embedding(chunk.id, chunk.content_hash, vector):
            stats.generated += 1
        else:
            stats.failed += 1

    logger.info(f"Embeddings generated for project {project_id}: {stats.as_dict()}")
    return stats
