"""Error taxonomy for codesearch."""

from __future__ import annotations


class CodesearchError(Exception):
    """Base class for all codesearch errors."""


class ConfigurationError(CodesearchError, ValueError):
    """Invalid input or settings, raised before any side effect."""


class TransientFileError(CodesearchError):
    """A file could not be read or decoded; the file is skipped."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ProviderUnavailable(CodesearchError):
    """The embedding provider could not produce a vector."""


class StoreError(CodesearchError):
    """A chunk store operation failed."""
