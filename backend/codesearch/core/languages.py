"""Language detection from file extensions."""

from __future__ import annotations

import os

UNKNOWN = "unknown"

EXT_TO_LANG = {
    ".rb": "ruby",
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".swift": "swift",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".ex": "elixir",
    ".exs": "elixir",
    ".clj": "clojure",
    ".scala": "scala",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
    ".yml": "yaml",
    ".yaml": "yaml",
    ".json": "json",
    ".toml": "toml",
    ".md": "markdown",
}


def classify(file_path: str) -> str:
    """Get language tag from file extension, or ``"unknown"``."""
    _, ext = os.path.splitext(file_path)
    return EXT_TO_LANG.get(ext.lower(), UNKNOWN)
