"""
Text embeddings and semantic similarity scoring.

Components:
- EmbeddingBackend: OpenAI API or local sentence-transformers embeddings
- SemanticSimilarityAdapter: cosine similarity rescaled to a 0-100 score
"""

from .embedding_model import (
    EmbeddingBackend,
    OpenAIEmbeddingBackend,
    SentenceTransformerBackend,
    create_embedding_backend,
)

from .semantic_similarity import (
    SemanticSimilarityAdapter,
    cosine_similarity,
    rescale_similarity,
)

__all__ = [
    # Backends
    "EmbeddingBackend",
    "OpenAIEmbeddingBackend",
    "SentenceTransformerBackend",
    "create_embedding_backend",
    # Semantic scoring
    "SemanticSimilarityAdapter",
    "cosine_similarity",
    "rescale_similarity",
]
