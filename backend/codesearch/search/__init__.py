"""Search functionality for codesearch."""

from .searcher import QueryEngine, SearchMode, extract_keywords, parse_mode, search

__all__ = [
    "QueryEngine",
    "SearchMode",
    "extract_keywords",
    "parse_mode",
    "search",
]
