"""
Collaborator contracts for the document processing pipeline.

Structural protocols so adapters (Gemini, LangChain embeddings, pypdf,
local files) and test fakes are interchangeable.

Dependencies: typing (stdlib)
System role: Seams between the pipeline and external systems
"""

from typing import Protocol

from regulex.core.document_processing.models import Document, ExtractedText, RuleDraft


class RawTextProvider(Protocol):
    """Decodes document bytes into text plus structural hints."""

    def extract(self, data: bytes, content_type: str) -> ExtractedText:
        """
        Raises:
            UnsupportedFormatError: Content type not handled
            CorruptDocumentError: Bytes cannot be decoded
        """
        ...


class RuleExtractionService(Protocol):
    """Generative model returning rule drafts for a chunk of text."""

    async def extract(self, chunk_text: str) -> list[RuleDraft]:
        """
        Raises:
            RateLimitedError, ExtractionTimeoutError: Transient, retried
            InvalidResponseError: Not retried
        """
        ...


class EmbeddingService(Protocol):
    """Embedding model returning one vector per text."""

    async def embed(self, text: str) -> list[float]:
        """
        Raises:
            EmbeddingError: Vector could not be produced
        """
        ...


class DocumentSource(Protocol):
    """Reads the raw bytes of a registered document."""

    async def load(self, document: Document) -> bytes:
        """
        Raises:
            DocumentProcessingError: Bytes are unavailable
        """
        ...
