"""File utility functions."""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence, Tuple

from ..config import IGNORED_PREFIXES, INDEXABLE_EXTENSIONS

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 100_000


def is_binary_file(path: Path) -> bool:
    """Check if file is binary by looking for null bytes."""
    try:
        with path.open("rb") as f:
            sample = f.read(2048)
        return b"\x00" in sample
    except OSError:
        return True


def content_sha256(content: str) -> str:
    """Calculate SHA256 hash of chunk content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _is_ignored(rel: str, prefixes: Sequence[str]) -> bool:
    return any(rel.startswith(p) for p in prefixes)


def walk_files(
    root: Path,
    allowed_extensions: Iterable[str] = INDEXABLE_EXTENSIONS,
    ignored_prefixes: Iterable[str] = IGNORED_PREFIXES,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> Iterator[Tuple[Path, str]]:
    """Yield ``(absolute_path, relative_path)`` for every indexable file under ``root``.

    Directories are visited in sorted order and ignored prefixes prune whole
    subtrees. Files that cannot be inspected are skipped.
    """
    root = Path(root).resolve()
    extensions = {e.lower() for e in allowed_extensions}
    prefixes = tuple(ignored_prefixes)

    for dirpath, dirs, files in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        rel_dir = "" if rel_dir == "." else rel_dir + "/"
        dirs[:] = sorted(d for d in dirs if not _is_ignored(rel_dir + d + "/", prefixes))

        for fname in sorted(files):
            rel = rel_dir + fname
            if _is_ignored(rel, prefixes):
                continue
            if os.path.splitext(fname)[1].lower() not in extensions:
                continue
            p = Path(dirpath, fname)
            try:
                if not p.is_file() or p.stat().st_size > max_file_size:
                    continue
            except OSError as e:
                logger.warning(f"Skipping unreadable file {rel}: {e}")
                continue
            if is_binary_file(p):
                continue
            yield p, rel


class FileWalker:
    """Restartable view over :func:`walk_files`; each iteration rescans the tree."""

    def __init__(
        self,
        root: Path,
        allowed_extensions: Optional[Iterable[str]] = None,
        ignored_prefixes: Optional[Iterable[str]] = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        self.root = Path(root)
        self.allowed_extensions = list(allowed_extensions if allowed_extensions is not None else INDEXABLE_EXTENSIONS)
        self.ignored_prefixes = list(ignored_prefixes if ignored_prefixes is not None else IGNORED_PREFIXES)
        self.max_file_size = max_file_size

    def __iter__(self) -> Iterator[Tuple[Path, str]]:
        return walk_files(self.root, self.allowed_extensions, self.ignored_prefixes, self.max_file_size)
