"""
Test suite for LangChainEmbeddingService.

System role: Verification of the embedding model adapter
"""

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings

from regulex.boundary.llm import LangChainEmbeddingService
from regulex.core.exceptions import EmbeddingError


class FailingEmbeddings(Embeddings):
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise ConnectionError("provider unreachable")

    def embed_query(self, text: str) -> list[float]:
        raise ConnectionError("provider unreachable")


class EmptyEmbeddings(Embeddings):
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [[] for _ in texts]

    def embed_query(self, text: str) -> list[float]:
        return []


class TestLangChainEmbeddingService:
    """Test suite for embed()."""

    async def test_embed_should_return_vector_of_model_size(self) -> None:
        # Arrange
        service = LangChainEmbeddingService(DeterministicFakeEmbedding(size=16))

        # Act
        first = await service.embed("income tax rate")
        second = await service.embed("income tax rate")

        # Assert
        assert len(first) == 16
        assert first == second

    async def test_embed_should_wrap_provider_failures(self) -> None:
        with pytest.raises(EmbeddingError):
            await LangChainEmbeddingService(FailingEmbeddings()).embed("text")

    async def test_embed_should_reject_empty_vectors(self) -> None:
        with pytest.raises(EmbeddingError):
            await LangChainEmbeddingService(EmptyEmbeddings()).embed("text")
