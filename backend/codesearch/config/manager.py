"""Configuration management for codesearch."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict, List, Optional


INDEXABLE_EXTENSIONS: List[str] = [
    ".rb", ".py", ".js", ".ts", ".jsx", ".tsx", ".go", ".rs", ".java", ".kt",
    ".swift", ".c", ".cpp", ".h", ".hpp", ".cs", ".ex", ".exs", ".clj",
    ".scala", ".sh", ".bash", ".zsh", ".yml", ".yaml", ".json", ".toml", ".md",
]

IGNORED_PREFIXES: List[str] = [
    "vendor/",
    "node_modules/",
    ".git/",
    "tmp/",
    "log/",
    "coverage/",
    "dist/",
    "build/",
]

DEFAULT_CONFIG: Dict = {
    "indexable_extensions": INDEXABLE_EXTENSIONS,
    "ignored_prefixes": IGNORED_PREFIXES,
    "max_file_size": 100_000,  # bytes
    "max_chunk_size": 10_000,  # bytes
    "index_attempts": 3,  # store failures retried by the index job
    "scan_caps": {
        # Line offset used when no closing line is found.
        "end_keyword": 20,
        "brace_depth": 30,
    },
    "search": {
        "default_limit": 10,
        "min_keyword_length": 3,
        "max_keywords": 10,
    },
    "embedding": {
        "backend": "none",
        "batch_size": 50,
        "sentence_transformers_model": "sentence-transformers/all-MiniLM-L6-v2",
        "api_base": "https://api.openai.com/v1",
        "model": "text-embedding-3-small",
        "max_input_tokens": 8000,
        "timeout": 30,
    },
    "database": {
        "url": "sqlite:///./codesearch.db",
    },
}


def load_config(repo: Optional[Path] = None) -> Dict:
    """Load configuration.

    Returns a copy of the default configuration with environment overrides
    applied. ``repo`` is accepted for call-site symmetry with the indexer and
    is currently unused.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    # Override from environment
    if os.getenv("DATABASE_URL"):
        config["database"]["url"] = os.environ["DATABASE_URL"]
    if os.getenv("EMBEDDING_BACKEND"):
        config["embedding"]["backend"] = os.environ["EMBEDDING_BACKEND"]
    if os.getenv("EMBEDDING_MODEL"):
        config["embedding"]["model"] = os.environ["EMBEDDING_MODEL"]
        config["embedding"]["sentence_transformers_model"] = os.environ["EMBEDDING_MODEL"]
    if os.getenv("EMBEDDING_API_BASE"):
        config["embedding"]["api_base"] = os.environ["EMBEDDING_API_BASE"]

    return config

