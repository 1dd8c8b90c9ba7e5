"""SQLAlchemy models."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Project(Base):
    """A repository whose source is indexed for search."""

    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    repo_path = Column(String(1024), nullable=False)
    status = Column(String(50), nullable=False, default="pending", index=True)  # pending, indexing, indexed, error
    total_chunks = Column(Integer, default=0)
    last_indexed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    error_message = Column(Text)

    # Relationships
    chunks = relationship("CodeChunk", back_populates="project", cascade="all, delete-orphan")


class CodeChunk(Base):
    """One indexed chunk; unique per (project, file_path, chunk_type, identifier)."""

    __tablename__ = "code_chunks"
    __table_args__ = (
        UniqueConstraint("project_id", "file_path", "chunk_type", "identifier", name="uq_code_chunks_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    file_path = Column(String(1024), nullable=False, index=True)
    chunk_type = Column(String(20), nullable=False)  # file, function, class, module, part
    identifier = Column(String(512))
    content = Column(Text, nullable=False)
    content_hash = Column(String(64), nullable=False)
    language = Column(String(50), nullable=False, default="unknown")
    start_line = Column(Integer, nullable=False)
    end_line = Column(Integer, nullable=False)
    embedding = Column(JSON(none_as_null=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="chunks")
