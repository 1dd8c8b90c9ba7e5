"""Indexer Interface."""

from __future__ import annotations

from pathlib import Path

from ..core.models import IndexStats


class Indexer:
    """Abstract base class for code indexing."""

    def index(self, project_id: int, repo: Path) -> IndexStats:
        raise NotImplementedError
