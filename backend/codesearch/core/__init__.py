"""Core functionality for codesearch."""

from .models import ChunkCandidate, ChunkRecord, EmbeddingStats, IndexStats
from .languages import classify
from .chunking import chunk_text, Chunker, DefaultChunker
from .embeddings import (
    Embedder,
    HttpEmbedder,
    NullEmbedder,
    SentenceTransformersEmbedder,
    make_embedder,
)

__all__ = [
    "ChunkCandidate",
    "ChunkRecord",
    "EmbeddingStats",
    "IndexStats",
    "classify",
    "chunk_text",
    "Chunker",
    "DefaultChunker",
    "Embedder",
    "HttpEmbedder",
    "NullEmbedder",
    "SentenceTransformersEmbedder",
    "make_embedder",
]
