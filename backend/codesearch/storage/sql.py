"""SQLAlchemy chunk store backend."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Collection, Iterator, List, Optional, Tuple

import numpy as np
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.models import ChunkKey, ChunkRecord
from ..errors import StoreError
from ..utils.file_utils import content_sha256
from ..web.models import CodeChunk
from .base import ChunkStore

logger = logging.getLogger(__name__)

_DELETE_BATCH = 500


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _to_record(row: CodeChunk) -> ChunkRecord:
    return ChunkRecord(
        id=row.id,
        project_id=row.project_id,
        file_path=row.file_path,
        chunk_type=row.chunk_type,
        identifier=row.identifier,
        content=row.content,
        content_hash=row.content_hash,
        language=row.language,
        start_line=row.start_line,
        end_line=row.end_line,
        embedding=list(row.embedding) if row.embedding else None,
    )


class SqlChunkStore(ChunkStore):
    """Chunk store over the ``code_chunks`` table.

    Every mutating call commits on its own; there is no run-wide transaction.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"{operation} failed: {e}") from e

    def _query(self, project_id: int):
        return self.db.query(CodeChunk).filter(CodeChunk.project_id == project_id)

    def _row(
        self, project_id: int, file_path: str, chunk_type: str, identifier: Optional[str]
    ) -> Optional[CodeChunk]:
        q = self._query(project_id).filter(
            CodeChunk.file_path == file_path,
            CodeChunk.chunk_type == chunk_type,
        )
        if identifier is None:
            q = q.filter(CodeChunk.identifier.is_(None))
        else:
            q = q.filter(CodeChunk.identifier == identifier)
        return q.first()

    def find_by(
        self, project_id: int, file_path: str, chunk_type: str, identifier: Optional[str]
    ) -> Optional[ChunkRecord]:
        with self._guard("find_by"):
            row = self._row(project_id, file_path, chunk_type, identifier)
            return _to_record(row) if row else None

    def upsert(self, record: ChunkRecord) -> ChunkRecord:
        with self._guard("upsert"):
            row = self._row(record.project_id, record.file_path, record.chunk_type, record.identifier)
            if row is None:
                row = CodeChunk(
                    project_id=record.project_id,
                    file_path=record.file_path,
                    chunk_type=record.chunk_type,
                    identifier=record.identifier,
                )
                self.db.add(row)

            record.content_hash = content_sha256(record.content)
            row.content = record.content
            row.content_hash = record.content_hash
            row.language = record.language
            row.start_line = record.start_line
            row.end_line = record.end_line
            row.embedding = record.embedding or None
            self.db.commit()
            record.id = row.id
            return record

    def delete_unvisited(self, project_id: int, visited_keys: Collection[ChunkKey]) -> int:
        visited = set(visited_keys)
        with self._guard("delete_unvisited"):
            rows = (
                self.db.query(CodeChunk.id, CodeChunk.file_path, CodeChunk.chunk_type, CodeChunk.identifier)
                .filter(CodeChunk.project_id == project_id)
                .all()
            )
            stale = [r.id for r in rows if (r.file_path, r.chunk_type, r.identifier) not in visited]

            for i in range(0, len(stale), _DELETE_BATCH):
                batch = stale[i:i + _DELETE_BATCH]
                self.db.query(CodeChunk).filter(CodeChunk.id.in_(batch)).delete(synchronize_session=False)
            self.db.commit()

        if stale:
            logger.info(f"Pruned {len(stale)} chunks from project {project_id}")
        return len(stale)

    def has_any_embedding(self, project_id: int) -> bool:
        with self._guard("has_any_embedding"):
            row = (
                self.db.query(CodeChunk.id)
                .filter(CodeChunk.project_id == project_id, CodeChunk.embedding.isnot(None))
                .first()
            )
            return row is not None

    def search_text(self, project_id: int, keywords: List[str], limit: int) -> List[ChunkRecord]:
        if not keywords:
            return []

        conditions = []
        for keyword in keywords:
            pattern = f"%{_escape_like(keyword)}%"
            conditions.extend([
                CodeChunk.content.ilike(pattern, escape="\\"),
                CodeChunk.file_path.ilike(pattern, escape="\\"),
                CodeChunk.identifier.ilike(pattern, escape="\\"),
            ])

        with self._guard("search_text"):
            rows = (
                self._query(project_id)
                .filter(or_(*conditions))
                .order_by(CodeChunk.file_path, CodeChunk.start_line, CodeChunk.id)
                .limit(limit)
                .all()
            )
            return [_to_record(r) for r in rows]

    def nearest(self, project_id: int, vector: List[float], limit: int) -> List[Tuple[float, ChunkRecord]]:
        query = np.asarray(vector, dtype=np.float64)
        with self._guard("nearest"):
            # Rank on the vectors alone; content is loaded only for the winners
            rows = (
                self.db.query(CodeChunk.id, CodeChunk.file_path, CodeChunk.start_line, CodeChunk.embedding)
                .filter(CodeChunk.project_id == project_id, CodeChunk.embedding.isnot(None))
                .all()
            )

        candidates = [r for r in rows if r.embedding and len(r.embedding) == len(query)]
        skipped = len(rows) - len(candidates)
        if skipped:
            logger.warning(
                f"Skipped {skipped} chunks in project {project_id} with embedding dimension != {len(query)}"
            )
        if not candidates:
            return []

        matrix = np.asarray([r.embedding for r in candidates], dtype=np.float64)
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        dots = matrix @ query
        with np.errstate(divide="ignore", invalid="ignore"):
            sims = np.where(norms > 0, dots / norms, 0.0)
        distances = 1.0 - sims

        ranked = sorted(
            zip(distances.tolist(), candidates),
            key=lambda pair: (pair[0], pair[1].file_path, pair[1].start_line, pair[1].id),
        )
        top = ranked[:limit]
        with self._guard("nearest"):
            loaded = self.db.query(CodeChunk).filter(CodeChunk.id.in_([r.id for _, r in top])).all()
        by_id = {row.id: row for row in loaded}
        return [(d, _to_record(by_id[r.id])) for d, r in top if r.id in by_id]

    def without_embeddings(self, project_id: int, limit: int) -> List[ChunkRecord]:
        with self._guard("without_embeddings"):
            rows = (
                self._query(project_id)
                .filter(CodeChunk.embedding.is_(None))
                .order_by(CodeChunk.id)
                .limit(limit)
                .all()
            )
            return [_to_record(r) for r in rows]

    def set_embedding(self, chunk_id: int, content_hash: str, vector: List[float]) -> bool:
        with self._guard("set_embedding"):
            row = (
                self.db.query(CodeChunk)
                .filter(CodeChunk.id == chunk_id, CodeChunk.content_hash == content_hash)
                .first()
            )
            if row is None:
                return False
            row.embedding = list(vector) or None
            self.db.commit()
            return True

    def list_chunks(self, project_id: int) -> List[ChunkRecord]:
        with self._guard("list_chunks"):
            rows = self._query(project_id).order_by(
                CodeChunk.file_path, CodeChunk.start_line, CodeChunk.id
            ).all()
            return [_to_record(r) for r in rows]

    def count(self, project_id: int) -> int:
        with self._guard("count"):
            return self._query(project_id).count()
