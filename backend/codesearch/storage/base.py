"""Abstract chunk storage interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Collection, List, Optional, Tuple

from ..core.models import ChunkKey, ChunkRecord


class ChunkStore(ABC):
    """Persistence contract for code chunks, always scoped to one project."""

    @abstractmethod
    def find_by(
        self, project_id: int, file_path: str, chunk_type: str, identifier: Optional[str]
    ) -> Optional[ChunkRecord]:
        """Look up a chunk by its identity key."""
        pass

    @abstractmethod
    def upsert(self, record: ChunkRecord) -> ChunkRecord:
        """Create or replace the chunk with the record's key."""
        pass

    @abstractmethod
    def delete_unvisited(self, project_id: int, visited_keys: Collection[ChunkKey]) -> int:
        """Delete the project's chunks whose key is not in ``visited_keys``."""
        pass

    @abstractmethod
    def has_any_embedding(self, project_id: int) -> bool:
        """Whether at least one chunk of the project carries an embedding."""
        pass

    @abstractmethod
    def search_text(self, project_id: int, keywords: List[str], limit: int) -> List[ChunkRecord]:
        """Case-insensitive substring match of any keyword on content, path or identifier."""
        pass

    @abstractmethod
    def nearest(self, project_id: int, vector: List[float], limit: int) -> List[Tuple[float, ChunkRecord]]:
        """Embedded chunks ordered by ascending cosine distance to ``vector``."""
        pass

    @abstractmethod
    def without_embeddings(self, project_id: int, limit: int) -> List[ChunkRecord]:
        """Chunks still waiting for an embedding."""
        pass

    @abstractmethod
    def set_embedding(self, chunk_id: int, content_hash: str, vector: List[float]) -> bool:
        """Attach a vector if the chunk still has ``content_hash``."""
        pass

    @abstractmethod
    def list_chunks(self, project_id: int) -> List[ChunkRecord]:
        """All chunks of a project ordered by file path and start line."""
        pass

    def count(self, project_id: int) -> int:
        """Count chunks of a project (default implementation)."""
        return len(self.list_chunks(project_id))
