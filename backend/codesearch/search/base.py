"""Searcher Interface."""

from __future__ import annotations

from typing import List, Optional

from ..core import ChunkRecord


class Searcher:
    """Abstract base class for chunk search."""

    def query(
        self,
        project_id: int,
        text: str,
        mode: str = "auto",
        limit: Optional[int] = None,
        embedding: Optional[List[float]] = None,
    ) -> List[ChunkRecord]:
        """Search a project's chunks.

        Args:
            project_id: Project whose chunks are searched
            text: Free-text query
            mode: One of ``semantic``, ``text``, ``hybrid`` or ``auto``
            limit: Maximum number of results
            embedding: Precomputed query embedding, if any

        Returns:
            Chunks ordered by relevance
        """
        raise NotImplementedError
