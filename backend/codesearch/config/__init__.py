"""Configuration management for codesearch."""

from .manager import (
    DEFAULT_CONFIG,
    IGNORED_PREFIXES,
    INDEXABLE_EXTENSIONS,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "IGNORED_PREFIXES",
    "INDEXABLE_EXTENSIONS",
    "load_config",
]
