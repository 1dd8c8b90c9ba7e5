"""codesearch: source-code indexing and retrieval."""

__version__ = "0.1.0"
