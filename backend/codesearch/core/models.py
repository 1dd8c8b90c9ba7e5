"""Data models for codesearch."""

from __future__ import annotations

import dataclasses
from typing import Dict, List, Optional, Tuple

CHUNK_TYPES = ("file", "function", "class", "module", "part")

# (file_path, chunk_type, identifier)
ChunkKey = Tuple[str, str, Optional[str]]


@dataclasses.dataclass
class ChunkCandidate:
    """A chunk produced by the chunker, before hashing and persistence."""

    chunk_type: str
    identifier: Optional[str]
    content: str
    start_line: int
    end_line: int


@dataclasses.dataclass
class ChunkRecord:
    """Represents a stored code chunk with metadata and optional embedding."""

    project_id: int
    file_path: str
    chunk_type: str
    identifier: Optional[str]
    content: str
    content_hash: str
    language: str
    start_line: int
    end_line: int
    embedding: Optional[List[float]] = None
    id: Optional[int] = None

    @property
    def key(self) -> ChunkKey:
        return (self.file_path, self.chunk_type, self.identifier)

    @property
    def embedded(self) -> bool:
        return bool(self.embedding)


@dataclasses.dataclass
class IndexStats:
    """Counters produced once per indexing run."""

    files_scanned: int = 0
    chunks_created: int = 0
    chunks_updated: int = 0
    chunks_unchanged: int = 0
    chunks_removed: int = 0

    def as_dict(self) -> Dict[str, int]:
        return dataclasses.asdict(self)


@dataclasses.dataclass
class EmbeddingStats:
    """Counters for one embedding backfill batch."""

    generated: int = 0
    failed: int = 0

    def as_dict(self) -> Dict[str, int]:
        return dataclasses.asdict(self)
