"""
Tests for ai_matching.ml.embeddings: cosine similarity, rescale and backends.
"""

import sys
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from ai_matching.ml.embeddings import (
    OpenAIEmbeddingBackend,
    SemanticSimilarityAdapter,
    SentenceTransformerBackend,
    cosine_similarity,
    create_embedding_backend,
    rescale_similarity,
)
from ai_matching.ml.llm import OpenAIClient
from ai_matching.utils.config import MLSettings
from ai_matching.utils.exceptions import ConfigurationError, ExternalServiceError


class TestCosineSimilarity:
    def test_identical_vectors(self):
        v = np.array([0.3, 0.4, 0.5])
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity(np.array([1.0, 2.0]), np.array([-1.0, -2.0])) == pytest.approx(-1.0)

    def test_zero_norm_gives_zero(self):
        assert cosine_similarity(np.zeros(3), np.array([1.0, 2.0, 3.0])) == 0.0

    def test_accepts_plain_lists(self):
        assert cosine_similarity([1.0, 1.0], [2.0, 2.0]) == pytest.approx(1.0)


class TestRescaleSimilarity:
    @pytest.mark.parametrize("similarity,expected", [
        (1.0, 100),
        (0.85, 100),
        (0.45, 0),
        (0.2, 0),
        (-1.0, 0),
        (0.65, 50),
        (0.516, 17),
        (0.628, 45),
    ])
    def test_rescale_points(self, similarity, expected):
        assert rescale_similarity(similarity) == expected

    def test_nan_gives_zero(self):
        assert rescale_similarity(float("nan")) == 0


class TestSemanticSimilarityAdapter:
    @pytest.mark.asyncio
    async def test_embeds_both_texts_in_one_call(self):
        backend = MagicMock()
        backend.model_name = "test-model"
        backend.embed = AsyncMock(return_value=[np.array([1.0, 0.0]), np.array([1.0, 0.0])])
        adapter = SemanticSimilarityAdapter(backend)

        score = await adapter.score("candidate", "job")

        assert score == 100
        backend.embed.assert_awaited_once_with(["candidate", "job"])

    @pytest.mark.asyncio
    async def test_wrong_vector_count_raises(self):
        backend = MagicMock()
        backend.model_name = "test-model"
        backend.embed = AsyncMock(return_value=[np.array([1.0, 0.0])])
        adapter = SemanticSimilarityAdapter(backend)

        with pytest.raises(ExternalServiceError):
            await adapter.score("candidate", "job")

    @pytest.mark.asyncio
    async def test_backend_error_propagates(self):
        backend = MagicMock()
        backend.model_name = "test-model"
        backend.embed = AsyncMock(side_effect=ExternalServiceError("down"))
        adapter = SemanticSimilarityAdapter(backend)

        with pytest.raises(ExternalServiceError):
            await adapter.score("candidate", "job")


class TestOpenAIEmbeddingBackend:
    @pytest.mark.asyncio
    async def test_returns_numpy_vectors_in_order(self):
        client = MagicMock(spec=OpenAIClient)
        client.embedding_model = "text-embedding-3-small"
        client.embed = AsyncMock(return_value=[[0.1, 0.2], [0.3, 0.4]])
        backend = OpenAIEmbeddingBackend(client)

        vectors = await backend.embed(["a", "b"])

        assert backend.model_name == "text-embedding-3-small"
        assert len(vectors) == 2
        assert isinstance(vectors[0], np.ndarray)
        assert vectors[1].tolist() == [0.3, 0.4]


class TestCreateEmbeddingBackend:
    def test_openai_is_default(self):
        client = MagicMock(spec=OpenAIClient)
        backend = create_embedding_backend(MLSettings(embedding_provider="openai"), client)
        assert isinstance(backend, OpenAIEmbeddingBackend)

    def test_openai_requires_client(self):
        with pytest.raises(ValueError):
            create_embedding_backend(MLSettings(embedding_provider="openai"))

    def test_local_backend_is_lazy(self):
        settings = MLSettings(embedding_provider="sentence-transformers", device="cpu")
        backend = create_embedding_backend(settings)
        assert isinstance(backend, SentenceTransformerBackend)
        assert backend._model is None
        assert backend.model_name == settings.local_embedding_model

    @pytest.mark.asyncio
    async def test_local_backend_encodes_in_thread(self):
        backend = SentenceTransformerBackend(device="cpu")
        model = MagicMock()
        model.encode.return_value = np.array([[1.0, 0.0], [0.0, 1.0]])
        backend._model = model

        vectors = await backend.embed(["a", "b"])

        assert [v.tolist() for v in vectors] == [[1.0, 0.0], [0.0, 1.0]]
        assert model.encode.call_args.kwargs["normalize_embeddings"] is True

    @pytest.mark.asyncio
    async def test_local_encoder_failure_is_external_service_error(self):
        backend = SentenceTransformerBackend(model_name="local-model", device="cpu")
        model = MagicMock()
        model.encode.side_effect = RuntimeError("CUDA out of memory")
        backend._model = model

        with pytest.raises(ExternalServiceError) as exc_info:
            await backend.embed(["a", "b"])

        assert exc_info.value.details == {"service": "sentence-transformers", "model": "local-model"}
        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.asyncio
    async def test_missing_local_extra_is_configuration_error(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "sentence_transformers", None)
        backend = SentenceTransformerBackend(device="cpu")

        with pytest.raises(ConfigurationError) as exc_info:
            await backend.embed(["a", "b"])

        assert exc_info.value.details["setting"] == "ml.embedding_provider"
