"""Source chunking using per-language boundary heuristics."""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from ..errors import ConfigurationError
from .models import ChunkCandidate

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_SIZE = 10_000
DEFAULT_SCAN_CAPS = {"end_keyword": 20, "brace_depth": 30}

# Definition keyword -> chunk type
KEYWORD_KINDS = {
    "def": "function",
    "defp": "function",
    "defmacro": "function",
    "defmacrop": "function",
    "fn": "function",
    "fun": "function",
    "func": "function",
    "function": "function",
    "class": "class",
    "struct": "class",
    "interface": "class",
    "enum": "class",
    "trait": "class",
    "impl": "class",
    "object": "class",
    "type": "class",
    "record": "class",
    "protocol": "class",
    "extension": "class",
    "defprotocol": "class",
    "defimpl": "class",
    "module": "module",
    "mod": "module",
    "namespace": "module",
    "defmodule": "module",
}

_MODIFIERS = (
    r"(?:(?:public|private|protected|internal|static|final|abstract|sealed|partial|"
    r"open|data|inner|enum|annotation|override|export|default|inline|fileprivate|"
    r"case|implicit|readonly|unsafe|async|virtual|extern|template<[^>]*>)\s+)*"
)


def byte_size(text: str) -> int:
    return len(text.encode("utf-8"))


def split_lines(content: str) -> List[str]:
    """Split on ``\\n`` only, keeping line endings."""
    return [line for line in re.split(r"(?<=\n)", content) if line]


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


# -----------------------------------------------------------------------------
# Strategies
# -----------------------------------------------------------------------------

class BoundaryStrategy:
    """Base class: find definition lines, then decide where each one ends."""

    family = ""

    def __init__(
        self,
        patterns: Iterable[str],
        single_line: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> None:
        self.patterns: List[Pattern[str]] = [re.compile(p) for p in patterns]
        self.single_line = re.compile(single_line) if single_line else None
        # Trailing comments are ignored when testing for a one-line body
        self.comment = re.compile(comment) if comment else None

    def is_single_line(self, line: str) -> bool:
        if not self.single_line:
            return False
        if self.comment:
            line = self.comment.sub("", line)
        return bool(self.single_line.search(line))

    def match_definition(self, line: str) -> Optional[Tuple[str, str]]:
        for pattern in self.patterns:
            m = pattern.match(line)
            if m:
                keyword = m.group("kw").rstrip("*")
                return KEYWORD_KINDS.get(keyword, "function"), m.group("name")
        return None

    def find_end(self, lines: List[str], start: int, scan_cap: int) -> int:
        """Return the 0-based inclusive end index of the construct at ``start``."""
        raise NotImplementedError

    def extract(self, lines: List[str], max_chunk_size: int, scan_cap: int) -> List[ChunkCandidate]:
        chunks: List[ChunkCandidate] = []
        for index, line in enumerate(lines):
            found = self.match_definition(line)
            if not found:
                continue
            chunk_type, identifier = found

            if self.is_single_line(line):
                end = index
            else:
                end = self.find_end(lines, index, scan_cap)

            text = "".join(lines[index:end + 1])
            if byte_size(text) > max_chunk_size:
                logger.debug(f"Discarding oversized {chunk_type} {identifier!r} at line {index + 1}")
                continue

            chunks.append(
                ChunkCandidate(
                    chunk_type=chunk_type,
                    identifier=identifier,
                    content=text,
                    start_line=index + 1,
                    end_line=end + 1,
                )
            )
        return chunks


class IndentationStrategy(BoundaryStrategy):
    """Construct ends before the next non-blank line indented no deeper than it."""

    family = "indentation"

    # Closing brackets of a multi-line signature continue the definition.
    _CONTINUATION = re.compile(r"^\s*[)\]}]")

    def find_end(self, lines: List[str], start: int, scan_cap: int) -> int:
        indent = _indent(lines[start])
        for i in range(start + 1, len(lines)):
            line = lines[i]
            if not line.strip():
                continue
            if self._CONTINUATION.match(line):
                continue
            if _indent(line) <= indent:
                return i - 1
        return len(lines) - 1


class EndKeywordStrategy(BoundaryStrategy):
    """Construct ends at the first ``end`` indented no deeper than it."""

    family = "end_keyword"

    _END = re.compile(r"end\b")

    def find_end(self, lines: List[str], start: int, scan_cap: int) -> int:
        indent = _indent(lines[start])
        for i in range(start + 1, len(lines)):
            line = lines[i]
            if not line.strip():
                continue
            if _indent(line) <= indent and self._END.match(line.lstrip()):
                return i
        return min(start + scan_cap, len(lines) - 1)


class BraceDepthStrategy(BoundaryStrategy):
    """Construct ends where the running ``{``/``}`` balance returns to zero."""

    family = "brace_depth"

    def find_end(self, lines: List[str], start: int, scan_cap: int) -> int:
        first = lines[start].rstrip()
        if first.endswith(";") and "{" not in first:
            return start

        depth = 0
        opened = False
        for i in range(start, len(lines)):
            line = lines[i]
            depth += line.count("{") - line.count("}")
            if "{" in line:
                opened = True
            if opened and depth <= 0:
                return i
        return min(start + scan_cap, len(lines) - 1)


# `#` up to end of line, except string interpolation `#{`
_HASH_COMMENT = r"\s*#(?!\{).*$"
_JS_PREFIX = r"^\s*(?:export\s+)?(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?"
_RUST_PREFIX = r"^\s*(?:pub(?:\([\w:\s]+\))?\s+)?(?:(?:async|const|unsafe|extern(?:\s+\"\w+\")?)\s+)*"

LANGUAGE_STRATEGIES: Dict[str, BoundaryStrategy] = {
    "python": IndentationStrategy([
        r"^(?:async\s+)?(?P<kw>def|class)\s+(?P<name>\w+)",
    ]),
    "ruby": EndKeywordStrategy(
        [r"^\s*(?P<kw>def|class|module)\s+(?P<name>(?:self\.)?[\w:]+[?!=]?)"],
        single_line=r"(?:;|\s)end\s*$",
        comment=_HASH_COMMENT,
    ),
    "elixir": EndKeywordStrategy(
        [r"^\s*(?P<kw>defmodule|defprotocol|defimpl|defmacrop?|defp?)\s+(?P<name>[\w.]+[?!]?)"],
        single_line=r",\s*do:",
        comment=_HASH_COMMENT,
    ),
    "javascript": BraceDepthStrategy([
        _JS_PREFIX + r"(?P<kw>function\*?|class)\s+\*?(?P<name>[\w$]+)",
    ]),
    "typescript": BraceDepthStrategy([
        _JS_PREFIX + r"(?P<kw>function\*?|class|interface|enum)\s+\*?(?P<name>[\w$]+)",
    ]),
    "go": BraceDepthStrategy([
        r"^(?P<kw>func)\s+(?:\([^)]*\)\s*)?(?P<name>\w+)",
        r"^(?P<kw>type)\s+(?P<name>\w+)\s+(?:struct|interface)\b",
    ]),
    "rust": BraceDepthStrategy([
        _RUST_PREFIX + r"(?P<kw>fn|struct|enum|trait|mod)\s+(?P<name>\w+)",
        r"^\s*(?:unsafe\s+)?(?P<kw>impl)(?:<[^>]*>)?\s+(?:[\w:<>, ]+?\s+for\s+)?(?P<name>[\w:]+)",
    ]),
    "java": BraceDepthStrategy([
        r"^\s*" + _MODIFIERS + r"(?P<kw>class|interface|enum|record)\s+(?P<name>\w+)",
    ]),
    "csharp": BraceDepthStrategy([
        r"^\s*" + _MODIFIERS + r"(?P<kw>class|interface|enum|struct|record|namespace)\s+(?P<name>[\w.]+)",
    ]),
    "kotlin": BraceDepthStrategy([
        r"^\s*" + _MODIFIERS + r"(?P<kw>class|interface|object)\s+(?P<name>\w+)",
        r"^\s*" + _MODIFIERS + r"(?P<kw>fun)\s+(?:<[^>]*>\s*)?(?:[\w.]+\.)?(?P<name>\w+)",
    ]),
    "swift": BraceDepthStrategy([
        r"^\s*" + _MODIFIERS + r"(?P<kw>class|struct|enum|protocol|extension|func)\s+(?P<name>\w+)",
    ]),
    "scala": BraceDepthStrategy([
        r"^\s*" + _MODIFIERS + r"(?P<kw>class|object|trait|def)\s+(?P<name>\w+)",
    ]),
    "cpp": BraceDepthStrategy([
        r"^\s*" + _MODIFIERS + r"(?P<kw>class|struct|namespace)\s+(?P<name>\w+)",
    ]),
}


# -----------------------------------------------------------------------------
# Fixed windows
# -----------------------------------------------------------------------------

def _split_long_line(line: str, max_chunk_size: int) -> List[str]:
    pieces: List[str] = []
    current: List[str] = []
    size = 0
    for ch in line:
        ch_size = byte_size(ch)
        if current and size + ch_size > max_chunk_size:
            pieces.append("".join(current))
            current, size = [], 0
        current.append(ch)
        size += ch_size
    if current:
        pieces.append("".join(current))
    return pieces


def chunk_windows(lines: List[str], max_chunk_size: int) -> List[ChunkCandidate]:
    """Split lines into sequential, non-overlapping windows of at most ``max_chunk_size`` bytes.

    A line longer than the limit is split into several windows that share its
    line number, so concatenating every window in order reproduces the input.
    """
    spans: List[Tuple[int, int, str]] = []
    buf: List[str] = []
    buf_size = 0
    buf_start = 1

    def flush() -> None:
        nonlocal buf, buf_size
        if buf:
            spans.append((buf_start, buf_start + len(buf) - 1, "".join(buf)))
            buf, buf_size = [], 0

    for lineno, line in enumerate(lines, start=1):
        size = byte_size(line)
        if size > max_chunk_size:
            flush()
            for piece in _split_long_line(line, max_chunk_size):
                spans.append((lineno, lineno, piece))
            continue
        if buf and buf_size + size > max_chunk_size:
            flush()
        if not buf:
            buf_start = lineno
        buf.append(line)
        buf_size += size
    flush()

    return [
        ChunkCandidate(
            chunk_type="part",
            identifier=f"part_{n}",
            content=text,
            start_line=start,
            end_line=end,
        )
        for n, (start, end, text) in enumerate(spans, start=1)
    ]


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------

class Chunker:
    """Abstract base class for source chunking."""

    def chunk(self, content: str, language: str, file_path: str) -> List[ChunkCandidate]:
        """Chunk file content.

        Args:
            content: Decoded file text
            language: Tag from :func:`codesearch.core.languages.classify`
            file_path: Project-relative path (used for the whole-file identifier)

        Returns:
            Chunk candidates in scan order
        """
        raise NotImplementedError


class DefaultChunker(Chunker):
    """Whole file when small, per-language strategy when large, windows otherwise."""

    def __init__(
        self,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        scan_caps: Optional[Dict[str, int]] = None,
        strategies: Optional[Dict[str, BoundaryStrategy]] = None,
    ) -> None:
        if int(max_chunk_size) < 1:
            raise ConfigurationError(f"max_chunk_size must be positive, got {max_chunk_size!r}")
        self.max_chunk_size = int(max_chunk_size)
        self.scan_caps = dict(DEFAULT_SCAN_CAPS)
        self.scan_caps.update(scan_caps or {})
        self.strategies = LANGUAGE_STRATEGIES if strategies is None else strategies

    def scan_cap(self, language: str, strategy: BoundaryStrategy) -> int:
        if language in self.scan_caps:
            return int(self.scan_caps[language])
        return int(self.scan_caps.get(strategy.family, DEFAULT_SCAN_CAPS["brace_depth"]))

    def chunk(self, content: str, language: str, file_path: str) -> List[ChunkCandidate]:
        if not content:
            return []

        lines = split_lines(content)

        # Small files are kept as a single chunk
        if byte_size(content) <= self.max_chunk_size:
            return [
                ChunkCandidate(
                    chunk_type="file",
                    identifier=os.path.basename(file_path),
                    content=content,
                    start_line=1,
                    end_line=len(lines),
                )
            ]

        strategy = self.strategies.get(language)
        if strategy is not None:
            chunks = strategy.extract(lines, self.max_chunk_size, self.scan_cap(language, strategy))
            if chunks:
                logger.debug(f"File {file_path}: {len(chunks)} {strategy.family} chunks")
                return chunks
            logger.debug(f"File {file_path}: no {language} boundaries found, using windows")

        return chunk_windows(lines, self.max_chunk_size)


def chunk_text(
    content: str,
    language: str,
    file_path: str,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    scan_caps: Optional[Dict[str, int]] = None,
) -> List[ChunkCandidate]:
    """Chunk file content (Functional Wrapper)."""
    chunker = DefaultChunker(max_chunk_size=max_chunk_size, scan_caps=scan_caps)
    return chunker.chunk(content, language, file_path)
