"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict

from ..config import load_config
from ..core import Embedder, make_embedder


@lru_cache(maxsize=1)
def _cached_config() -> Dict:
    return load_config()


def get_config() -> Dict:
    return _cached_config()


@lru_cache(maxsize=1)
def _cached_embedder() -> Embedder:
    return make_embedder(_cached_config())


def get_embedder() -> Embedder:
    return _cached_embedder()
