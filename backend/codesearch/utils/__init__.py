"""Utility functions for codesearch."""

from .file_utils import (
    FileWalker,
    content_sha256,
    is_binary_file,
    walk_files,
)

__all__ = [
    "FileWalker",
    "content_sha256",
    "is_binary_file",
    "walk_files",
]
