"""
Chunk domain models for the document processing pipeline.

Section is the analyzer's labelled span of raw text; DocumentChunk is the
planner's unit of extraction with its overlap context and lifecycle state.

Dependencies: pydantic
System role: Data structures for segmentation and chunk lifecycle
"""

import hashlib
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Structural label of a section or chunk."""

    HEADER = "header"
    BODY = "body"
    TABLE = "table"
    FORMULA = "formula"
    LIST = "list"


class ChunkStatus(str, Enum):
    """Chunk processing lifecycle."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    NEEDS_REVIEW = "needs_review"


def chunk_id_for(document_id: str, sequence: int) -> str:
    """
    Build the deterministic chunk identifier.

    Neighbours of a chunk are addressable as chunk_id_for(doc, seq - 1) and
    chunk_id_for(doc, seq + 1) without a store lookup.

    Args:
        document_id: Owning document ID
        sequence: 0-based chunk position within the document

    Returns:
        str: 16-character hex digest
    """
    return hashlib.sha256(f"{document_id}:{sequence}".encode()).hexdigest()[:16]


class Section(BaseModel):
    """Contiguous labelled span of source text."""

    content_type: ContentType = Field(description="Structural label")
    text: str = Field(description="Exact source text of the span")
    start: int = Field(ge=0, description="Start offset in the source text")
    end: int = Field(ge=0, description="End offset (exclusive) in the source text")


class DocumentChunk(BaseModel):
    """Size-bounded unit of extraction."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(description="Deterministic chunk ID (hash of document ID and sequence)")
    document_id: str = Field(description="Owning document ID")
    sequence: int = Field(ge=0, description="0-based position within the document")
    byte_range: tuple[int, int] = Field(description="(start, end) offsets of the core text")
    text: str = Field(description="Authoritative core text")
    content_type: ContentType = Field(description="Content type of the originating section")
    overlap_prev: int = Field(default=0, ge=0, description="Words copied from the previous chunk")
    overlap_next: int = Field(default=0, ge=0, description="Words copied from the next chunk")
    overlap_prefix: str = Field(default="", description="Text copied from the previous chunk")
    overlap_suffix: str = Field(default="", description="Text copied from the next chunk")
    status: ChunkStatus = Field(default=ChunkStatus.PENDING, description="Lifecycle status")
    retry_count: int = Field(default=0, ge=0, description="Retries performed so far")
    quality_score: float | None = Field(default=None, ge=0.0, le=1.0, description="Quality score")
    context_keywords: set[str] = Field(default_factory=set, description="Keywords found in the core")
    unit_count: int = Field(default=0, ge=0, description="Size of the core in units")
    oversized: bool = Field(default=False, description="Atomic unit exceeded its budget")

    @property
    def padded_text(self) -> str:
        """Core text with overlap context, sent to the extraction model."""
        return f"{self.overlap_prefix}{self.text}{self.overlap_suffix}"

    @property
    def previous_id(self) -> str | None:
        """ID of the preceding chunk, or None for the first chunk."""
        if self.sequence == 0:
            return None
        return chunk_id_for(self.document_id, self.sequence - 1)

    @property
    def next_id(self) -> str:
        """ID the following chunk would have (it may not exist)."""
        return chunk_id_for(self.document_id, self.sequence + 1)
