"""Project management routes."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from pathlib import Path

from ..database import get_db
from ..models import Project
from ..schemas import ProjectCreate, ProjectResponse

router = APIRouter(prefix="/projects")


def get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


@router.get("", response_model=List[ProjectResponse])
async def list_projects(db: Session = Depends(get_db)):
    """List all tracked projects."""
    return db.query(Project).order_by(Project.id).all()


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(request: ProjectCreate, db: Session = Depends(get_db)):
    """Register a repository for indexing."""
    repo_path = Path(request.repo_path).expanduser()
    if not repo_path.is_dir():
        raise HTTPException(status_code=400, detail=f"repo_path does not exist: {request.repo_path}")

    if db.query(Project).filter(Project.name == request.name).first():
        raise HTTPException(status_code=409, detail=f"Project '{request.name}' already exists")

    project = Project(name=request.name, repo_path=str(repo_path.resolve()), status="pending", total_chunks=0)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(project_id: int, db: Session = Depends(get_db)):
    return get_project_or_404(db, project_id)


@router.delete("/{project_id}")
async def delete_project(project_id: int, force: bool = False, db: Session = Depends(get_db)):
    """Remove a project together with its chunks."""
    project = get_project_or_404(db, project_id)
    if project.status == "indexing" and not force:
        raise HTTPException(status_code=409, detail="Project is being indexed")
    name = project.name
    db.delete(project)
    db.commit()
    return {"success": True, "message": f"Project '{name}' deleted"}
