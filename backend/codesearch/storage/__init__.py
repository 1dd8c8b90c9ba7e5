"""Chunk storage backends."""

from .base import ChunkStore
from .sql import SqlChunkStore

__all__ = [
    "ChunkStore",
    "SqlChunkStore",
]
