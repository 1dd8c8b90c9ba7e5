"""Initial schema

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-18 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create projects table
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('repo_path', sa.String(length=1024), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('total_chunks', sa.Integer(), server_default='0'),
        sa.Column('last_indexed_at', sa.DateTime(timezone=True)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('error_message', sa.Text()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index('idx_projects_status', 'projects', ['status'])

    # Create code_chunks table
    op.create_table(
        'code_chunks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('file_path', sa.String(length=1024), nullable=False),
        sa.Column('chunk_type', sa.String(length=20), nullable=False),
        sa.Column('identifier', sa.String(length=512)),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('content_hash', sa.String(length=64), nullable=False),
        sa.Column('language', sa.String(length=50), nullable=False, server_default='unknown'),
        sa.Column('start_line', sa.Integer(), nullable=False),
        sa.Column('end_line', sa.Integer(), nullable=False),
        sa.Column('embedding', sa.JSON()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'file_path', 'chunk_type', 'identifier', name='uq_code_chunks_key')
    )
    op.create_index('idx_code_chunks_project_id', 'code_chunks', ['project_id'])
    op.create_index('idx_code_chunks_file_path', 'code_chunks', ['project_id', 'file_path'])


def downgrade() -> None:
    op.drop_index('idx_code_chunks_file_path', table_name='code_chunks')
    op.drop_index('idx_code_chunks_project_id', table_name='code_chunks')
    op.drop_table('code_chunks')

    op.drop_index('idx_projects_status', table_name='projects')
    op.drop_table('projects')
