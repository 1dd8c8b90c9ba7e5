"""Embedding providers for semantic search."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional

import requests
import tiktoken

from ..errors import ConfigurationError, ProviderUnavailable

logger = logging.getLogger(__name__)

Vector = List[float]


class Embedder:
    """Abstract base class for embedding providers.

    ``embed`` returns ``None`` when the provider is unavailable; it raises only
    for configuration misuse.
    """

    def embed(self, text: str) -> Optional[Vector]:
        """Embed a single text into a vector."""
        try:
            return self._embed(text)
        except ProviderUnavailable as e:
            logger.warning(f"Embedding unavailable: {e}")
            return None

    def embed_many(self, texts: List[str]) -> List[Optional[Vector]]:
        """Embed multiple texts; unavailable entries are ``None``."""
        return [self.embed(t) for t in texts]

    def _embed(self, text: str) -> Vector:
        raise NotImplementedError


class NullEmbedder(Embedder):
    """No provider configured: every request is unavailable."""

    def embed(self, text: str) -> Optional[Vector]:
        logger.debug("Embedding skipped: no embedding provider configured")
        return None


class SentenceTransformersEmbedder(Embedder):
    """Embedder using SentenceTransformers library."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        self._model = None

    @property
    def model(self):
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer  # type: ignore
                self._model = SentenceTransformer(self.model_name)
            except Exception as e:
                raise ProviderUnavailable(
                    f"could not load sentence-transformers model {self.model_name!r}: {e}"
                ) from e
        return self._model

    def _embed(self, text: str) -> Vector:
        arr = self.model.encode([text], normalize_embeddings=True, show_progress_bar=False)
        return arr[0].tolist()


@dataclass
class HttpEmbedderConfig:
    api_base: str = "https://api.openai.com/v1"
    model: str = "text-embedding-3-small"
    max_input_tokens: Optional[int] = 8000
    timeout: int = 30


class HttpEmbedder(Embedder):
    """Embedder calling an OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(self, config: HttpEmbedderConfig | None = None, api_key: Optional[str] = None):
        self.config = config or HttpEmbedderConfig()
        self.api_key = api_key if api_key is not None else os.getenv("EMBEDDING_API_KEY")
        self._encoder = None

    def _truncate(self, text: str) -> str:
        limit = self.config.max_input_tokens
        if not limit:
            return text
        if self._encoder is None:
            try:
                try:
                    self._encoder = tiktoken.encoding_for_model(self.config.model)
                except KeyError:
                    self._encoder = tiktoken.get_encoding("cl100k_base")
            except Exception as e:
                raise ProviderUnavailable(f"could not load tokenizer: {e}") from e
        tokens = self._encoder.encode(text)
        if len(tokens) <= limit:
            return text
        return self._encoder.decode(tokens[:limit])

    def _embed(self, text: str) -> Vector:
        if not self.api_key:
            raise ProviderUnavailable("EMBEDDING_API_KEY is not set")

        url = f"{self.config.api_base.rstrip('/')}/embeddings"
        payload = {"model": self.config.model, "input": self._truncate(text)}
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.config.timeout)
        except requests.RequestException as e:
            raise ProviderUnavailable(f"request to {url} failed: {e}") from e

        if response.status_code in (400, 422):
            raise ConfigurationError(
                f"Embedding request rejected ({response.status_code}): {response.text[:200]}"
            )
        if response.status_code >= 400:
            raise ProviderUnavailable(f"embedding API returned {response.status_code}")

        try:
            data = response.json()
            return [float(x) for x in data["data"][0]["embedding"]]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderUnavailable(f"unexpected embedding response: {e}") from e


def make_embedder(cfg: Dict) -> Embedder:
    """Create embedder from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        Embedder instance

    Raises:
        ConfigurationError: If the backend name is not recognised
    """
    emb_cfg = cfg.get("embedding", {})
    backend = str(emb_cfg.get("backend", "none")).strip().lower()

    if backend in ("", "none"):
        return NullEmbedder()
    if backend == "sentence_transformers":
        return SentenceTransformersEmbedder(
            emb_cfg.get("sentence_transformers_model", "sentence-transformers/all-MiniLM-L6-v2")
        )
    if backend == "http":
        return HttpEmbedder(
            HttpEmbedderConfig(
                api_base=emb_cfg.get("api_base", HttpEmbedderConfig.api_base),
                model=emb_cfg.get("model", HttpEmbedderConfig.model),
                max_input_tokens=emb_cfg.get("max_input_tokens", HttpEmbedderConfig.max_input_tokens),
                timeout=int(emb_cfg.get("timeout", HttpEmbedderConfig.timeout)),
            )
        )
    raise ConfigurationError(f"Invalid embedding.backend: {backend!r}")
