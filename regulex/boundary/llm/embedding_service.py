"""
Embedding service over LangChain embeddings.

Dependencies: langchain_core, langchain_google_genai
System role: Embedding model adapter for indexing and query embedding
"""

import logging

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from regulex.configs.models import ModelSettings
from regulex.core.exceptions import EmbeddingError

logger = logging.getLogger(__name__)


class LangChainEmbeddingService:
    """Embed single texts through any LangChain Embeddings implementation."""

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings

    @classmethod
    def from_settings(cls, settings: ModelSettings | None = None) -> "LangChainEmbeddingService":
        """Build the Gemini-backed service from model settings."""
        settings = settings or ModelSettings()
        return cls(GoogleGenerativeAIEmbeddings(model=settings.embedding_model))

    async def embed(self, text: str) -> list[float]:
        """
        Embed one text.

        Args:
            text: Text to embed

        Returns:
            list[float]: Embedding vector

        Raises:
            EmbeddingError: When the provider call fails or returns no vector
        """
        try:
            vector = await self._embeddings.aembed_query(text)
        except Exception as e:
            raise EmbeddingError(
                f"Embedding failed: {type(e).__name__}",
                details={"text_length": len(text)},
            ) from e
        if not vector:
            raise EmbeddingError("Embedding provider returned an empty vector")
        return list(vector)
