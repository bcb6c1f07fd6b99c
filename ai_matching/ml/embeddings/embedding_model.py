"""
Embedding backends for semantic similarity.

Two interchangeable backends produce one vector per input text, in input
order: the OpenAI embeddings API (default) and a local sentence-transformers
model selected with ``ML_EMBEDDING_PROVIDER=sentence-transformers``.
"""

import asyncio
from typing import Optional, Protocol

import numpy as np

from ai_matching.ml.llm.client import OpenAIClient
from ai_matching.utils.config import MLSettings
from ai_matching.utils.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    MatchingError,
)
from ai_matching.utils.logger import get_logger

logger = get_logger(__name__)


class EmbeddingBackend(Protocol):
    """Anything that can embed a batch of texts."""

    model_name: str

    async def embed(self, texts: list[str]) -> list[np.ndarray]:
        ...


class OpenAIEmbeddingBackend:
    """Embeddings from the OpenAI API, one request per batch."""

    def __init__(self, client: OpenAIClient):
        self.client = client

    @property
    def model_name(self) -> str:
        return self.client.embedding_model

    async def embed(self, texts: list[str]) -> list[np.ndarray]:
        vectors = await self.client.embed(texts)
        return [np.asarray(vector, dtype=np.float64) for vector in vectors]


class SentenceTransformerBackend:
    """
    Embeddings from a local sentence-transformers model.

    The model is loaded on first use and encoding runs in a worker thread
    so the event loop is never blocked.
    """

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        device: str = "cpu",
        batch_size: int = 32,
    ):
        self.model_name = model_name
        self.device = device
        self.batch_size = batch_size

        self._model = None

    @classmethod
    def from_settings(cls, settings: MLSettings) -> "SentenceTransformerBackend":
        return cls(
            model_name=settings.local_embedding_model,
            device=settings.device,
            batch_size=settings.batch_size,
        )

    def _load_model(self):
        """Lazy load the embedding model."""
        if self._model is not None:
            return self._model

        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ConfigurationError(
                "sentence-transformers not installed. "
                "Install with: pip install 'ai-matching[local-embeddings]'",
                setting="ml.embedding_provider",
                cause=e,
            ) from e

        logger.info(f"Loading embedding model: {self.model_name}")
        self._model = SentenceTransformer(self.model_name, device=self.device)
        logger.info(f"Embedding model loaded on device: {self.device}")
        return self._model

    def _encode(self, texts: list[str]) -> np.ndarray:
        model = self._load_model()
        return model.encode(
            texts,
            batch_size=self.batch_size,
            show_progress_bar=False,
            normalize_embeddings=True,
            convert_to_numpy=True,
        )

    async def embed(self, texts: list[str]) -> list[np.ndarray]:
        """
        Raises:
            ConfigurationError: If sentence-transformers is not installed.
            ExternalServiceError: If the model fails to load or encode.
        """
        try:
            embeddings = await asyncio.to_thread(self._encode, texts)
        except MatchingError:
            raise
        except Exception as e:
            logger.error(f"Local embedding with {self.model_name} failed: {e}")
            raise ExternalServiceError(
                f"Local embedding failed: {e}",
                service="sentence-transformers",
                model=self.model_name,
                cause=e,
            ) from e
        return [np.asarray(row, dtype=np.float64) for row in embeddings]


def create_embedding_backend(
    settings: MLSettings,
    client: Optional[OpenAIClient] = None,
) -> EmbeddingBackend:
    """Build the embedding backend selected by configuration."""
    if settings.embedding_provider == "sentence-transformers":
        return SentenceTransformerBackend.from_settings(settings)

    if client is None:
        raise ValueError("OpenAI embedding backend requires an OpenAI client")
    return OpenAIEmbeddingBackend(client)
