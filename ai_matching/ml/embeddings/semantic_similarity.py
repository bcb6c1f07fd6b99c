"""
Semantic similarity between a candidate and a job.

Both text blocks are embedded in a single batch, compared by cosine
similarity and rescaled onto 0..100. Typical resume/job similarities sit
between roughly 0.55 and 0.85, so the rescale maps 0.45 to 0 and 0.85 to
100.
"""

import math

import numpy as np

from ai_matching.utils.constants import (
    MAX_SCORE,
    MIN_SCORE,
    SEMANTIC_SIMILARITY_FLOOR,
    SEMANTIC_SIMILARITY_SCALE,
)
from ai_matching.ml.llm.schema import round_half_up
from ai_matching.utils.exceptions import ExternalServiceError
from ai_matching.utils.logger import LoggerMixin

from .embedding_model import EmbeddingBackend


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity of two vectors; 0.0 if either has zero norm."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


def rescale_similarity(similarity: float) -> int:
    """Map a cosine similarity onto an integer score in 0..100."""
    if math.isnan(similarity) or math.isinf(similarity):
        return MIN_SCORE
    score = round_half_up(max(0.0, (similarity - SEMANTIC_SIMILARITY_FLOOR) * SEMANTIC_SIMILARITY_SCALE))
    return int(max(MIN_SCORE, min(MAX_SCORE, score)))


class SemanticSimilarityAdapter(LoggerMixin):
    """Scores candidate/job closeness from their embeddings."""

    def __init__(self, backend: EmbeddingBackend):
        self.backend = backend

    @property
    def model_name(self) -> str:
        return self.backend.model_name

    async def score(self, candidate_text: str, job_text: str) -> int:
        """
        Semantic score for a candidate text against a job text.

        Raises:
            ExternalServiceError: If the backend fails or returns the wrong number of vectors.
        """
        vectors = await self.backend.embed([candidate_text, job_text])
        if len(vectors) != 2:
            raise ExternalServiceError(
                f"Expected 2 embeddings, got {len(vectors)}",
                service="embeddings",
                model=self.model_name,
            )

        similarity = cosine_similarity(vectors[0], vectors[1])
        score = rescale_similarity(similarity)
        self.logger.debug(f"Semantic similarity {similarity:.4f} -> {score}")
        return score
