"""Indexing functionality for codesearch."""

from .embeddings import generate_embeddings
from .indexer import IncrementalIndexer, build_index, read_source
from .jobs import index_project

__all__ = [
    "IncrementalIndexer",
    "build_index",
    "generate_embeddings",
    "index_project",
    "read_source",
]
