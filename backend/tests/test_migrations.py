"""Tests for the Alembic migrations."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def _alembic_config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


class TestMigrations:
    """Test schema upgrade and downgrade on SQLite."""

    def test_upgrade_creates_schema(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'migrate.db'}"
        command.upgrade(_alembic_config(url), "head")

        inspector = inspect(create_engine(url))
        assert {"projects", "code_chunks"} <= set(inspector.get_table_names())
        columns = {c["name"] for c in inspector.get_columns("code_chunks")}
        assert {"content_hash", "identifier", "embedding", "start_line", "end_line"} <= columns
        uniques = {u["name"] for u in inspector.get_unique_constraints("code_chunks")}
        assert "uq_code_chunks_key" in uniques

    def test_downgrade_drops_schema(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'migrate.db'}"
        cfg = _alembic_config(url)
        command.upgrade(cfg, "head")
        command.downgrade(cfg, "base")

        tables = set(inspect(create_engine(url)).get_table_names())
        assert "code_chunks" not in tables
        assert "projects" not in tables
