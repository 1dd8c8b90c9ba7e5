"""Indexing routes with SSE support."""

from fastapi import APIRouter, Depends, BackgroundTasks, HTTPException
from sqlalchemy.orm import Session, sessionmaker
from sse_starlette.sse import EventSourceResponse
from typing import Dict
import asyncio
import json
import logging

from ...core import Embedder
from ...indexing import generate_embeddings, index_project
from ...storage import SqlChunkStore

from ..database import get_db, get_session_factory
from ..deps import get_config, get_embedder
from ..models import Project
from ..schemas import EmbeddingsRequest, EmbeddingsResponse, IndexStatusResponse
from .projects import get_project_or_404

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects")

# Last run outcome per project
indexing_progress: Dict[int, Dict] = {}


def index_project_task(session_factory: sessionmaker, project_id: int, embedder: Embedder, cfg: Dict) -> None:
    """Background task to index a project."""
    indexing_progress[project_id] = {"status": "indexing"}
    try:
        stats = index_project(session_factory, project_id, embedder=embedder, cfg=cfg)
        indexing_progress[project_id] = {
            "status": "indexed",
            "stats": stats.as_dict() if stats else None,
        }
    except Exception as e:
        logger.exception(f"Error indexing project {project_id}")
        indexing_progress[project_id] = {"status": "error", "error": str(e)}


@router.post("/{project_id}/index", status_code=202)
async def start_indexing(
    project_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
    embedder: Embedder = Depends(get_embedder),
    cfg: Dict = Depends(get_config),
    force: bool = False,
):
    """Start indexing a project's repository.

    ``force`` restarts a project left in ``indexing`` by an interrupted run.
    """
    project = get_project_or_404(db, project_id)
    if project.status == "indexing" and not force:
        raise HTTPException(status_code=409, detail="Project is already being indexed")

    # Update status immediately
    project.status = "indexing"
    project.error_message = None
    db.commit()

    logger.info(f"Starting background indexing task for project {project_id} ({project.name})")
    background_tasks.add_task(index_project_task, session_factory, project_id, embedder, cfg)

    return {
        "message": f"Indexing started for project '{project.name}'",
        "project_id": project_id,
    }


@router.get("/{project_id}/index/status", response_model=IndexStatusResponse)
async def index_status(project_id: int, db: Session = Depends(get_db)):
    project = get_project_or_404(db, project_id)
    progress = indexing_progress.get(project_id, {})
    return IndexStatusResponse(
        project_id=project.id,
        status=project.status,
        total_chunks=project.total_chunks or 0,
        last_indexed_at=project.last_indexed_at,
        error=project.error_message,
        stats=progress.get("stats"),
    )


@router.get("/{project_id}/index/progress")
async def index_progress(
    project_id: int,
    db: Session = Depends(get_db),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """SSE endpoint for indexing progress."""
    get_project_or_404(db, project_id)

    async def event_generator():
        while True:
            # The request session may be closed once streaming starts
            session = session_factory()
            try:
                project = session.query(Project).filter(Project.id == project_id).first()
            finally:
                session.close()
            if project is None:
                break
            progress = indexing_progress.get(project_id, {})

            yield {
                "event": "progress",
                "data": json.dumps({
                    "project_id": project_id,
                    "status": project.status,
                    "total_chunks": project.total_chunks,
                    "stats": progress.get("stats"),
                    "error": project.error_message,
                }),
            }

            if project.status in ["indexed", "error", "pending"]:
                break

            await asyncio.sleep(1)

    return EventSourceResponse(event_generator())


@router.post("/{project_id}/embeddings", response_model=EmbeddingsResponse)
async def create_embeddings(
    project_id: int,
    request: EmbeddingsRequest,
    db: Session = Depends(get_db),
    embedder: Embedder = Depends(get_embedder),
):
    """Generate embeddings for chunks that have none yet."""
    project = get_project_or_404(db, project_id)
    stats = generate_embeddings(SqlChunkStore(db), embedder, project.id, batch_size=request.batch_size)
    return EmbeddingsResponse(**stats.as_dict())
