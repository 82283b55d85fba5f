"""
Exception hierarchy for the regulex pipeline.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Per-attempt failure vocabulary for chunk extraction."""

    RATE_LIMITED = "rate_limited"
    TIMEOUT = "timeout"
    INVALID_RESPONSE = "invalid_response"

    @property
    def retryable(self) -> bool:
        """Transient kinds are retried under the retry policy."""
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.TIMEOUT)


class RegulexException(Exception):
    """Base exception for all regulex errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class DocumentNotFoundError(RegulexException):
    """Raised when a document cannot be found."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize document not found error.

        Args:
            document_id: ID of the missing document
            details: Additional context
        """
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DocumentProcessingError(RegulexException):
    """Base exception for document-level processing errors (fatal, never retried)."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class UnsupportedFormatError(DocumentProcessingError):
    """Raised when the text provider cannot handle a content type."""

    def __init__(
        self,
        content_type: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["content_type"] = content_type
        super().__init__(f"Unsupported content type: {content_type}", document_id, details)


class CorruptDocumentError(DocumentProcessingError):
    """Raised when document bytes cannot be decoded into text."""

    pass


class ChunkExtractionError(RegulexException):
    """Base exception for per-chunk extraction failures."""

    kind: ErrorKind = ErrorKind.INVALID_RESPONSE

    def __init__(
        self,
        message: str,
        chunk_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize chunk extraction error.

        Args:
            message: Error message
            chunk_id: ID of the chunk being extracted
            details: Additional context
        """
        details = details or {}
        if chunk_id:
            details["chunk_id"] = chunk_id
        details["error_kind"] = self.kind.value
        super().__init__(message, details)


class RateLimitedError(ChunkExtractionError):
    """Raised when the extraction model rejects a call for quota reasons."""

    kind = ErrorKind.RATE_LIMITED


class ExtractionTimeoutError(ChunkExtractionError):
    """Raised when an extraction call exceeds its timeout."""

    kind = ErrorKind.TIMEOUT


class InvalidResponseError(ChunkExtractionError):
    """Raised when the extraction model returns output that cannot be parsed."""

    kind = ErrorKind.INVALID_RESPONSE


class EmbeddingError(RegulexException):
    """Raised when embedding generation fails."""

    pass


class VectorStoreError(RegulexException):
    """Raised when vector index operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, search, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class PersistenceError(RegulexException):
    """Raised when the durable store fails. Always propagated."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)
