from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List, Literal


class ProjectCreate(BaseModel):
    name: str
    repo_path: str


class ProjectResponse(BaseModel):
    id: int
    name: str
    repo_path: str
    status: str
    total_chunks: int
    last_indexed_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    error_message: Optional[str]

    class Config:
        from_attributes = True


class IndexStatsResponse(BaseModel):
    files_scanned: int = 0
    chunks_created: int = 0
    chunks_updated: int = 0
    chunks_unchanged: int = 0
    chunks_removed: int = 0


class IndexStatusResponse(BaseModel):
    project_id: int
    status: str
    total_chunks: int
    last_indexed_at: Optional[datetime]
    error: Optional[str] = None
    stats: Optional[IndexStatsResponse] = None


class EmbeddingsRequest(BaseModel):
    batch_size: int = Field(50, ge=1, le=1000)


class EmbeddingsResponse(BaseModel):
    generated: int
    failed: int


class SearchRequest(BaseModel):
    query: str
    project_id: int
    mode: Literal["semantic", "text", "hybrid", "auto"] = "auto"
    limit: Optional[int] = Field(None, ge=1, le=200)
    embedding: Optional[List[float]] = None


class SearchResult(BaseModel):
    project_id: int
    file_path: str
    chunk_type: str
    identifier: Optional[str]
    language: str
    start_line: int
    end_line: int
    content: str


class SearchResponse(BaseModel):
    results: List[SearchResult]
