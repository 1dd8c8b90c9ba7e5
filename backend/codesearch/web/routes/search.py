"""Search routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Dict

from ...core import Embedder
from ...errors import ConfigurationError
from ...search import QueryEngine
from ...storage import SqlChunkStore

from ..database import get_db
from ..deps import get_config, get_embedder
from ..schemas import SearchRequest, SearchResponse, SearchResult
from .projects import get_project_or_404

router = APIRouter()


@router.post("/search", response_model=SearchResponse)
async def search(
    request: SearchRequest,
    db: Session = Depends(get_db),
    embedder: Embedder = Depends(get_embedder),
    cfg: Dict = Depends(get_config),
):
    project = get_project_or_404(db, request.project_id)

    engine = QueryEngine(SqlChunkStore(db), embedder=embedder, cfg=cfg)
    try:
        hits = engine.query(
            project.id,
            request.query,
            mode=request.mode,
            limit=request.limit,
            embedding=request.embedding,
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    results = [
        SearchResult(
            project_id=record.project_id,
            file_path=record.file_path,
            chunk_type=record.chunk_type,
            identifier=record.identifier,
            language=record.language,
            start_line=record.start_line,
            end_line=record.end_line,
            content=record.content,
        )
        for record in hits
    ]
    return SearchResponse(results=results)
