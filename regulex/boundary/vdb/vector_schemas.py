"""
Vector index schemas.

Pydantic models for vector operations (entries, metadata, results).
Used for type-safe vector index interactions.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from enum import Enum

from pydantic import BaseModel, Field


class VectorKind(str, Enum):
    """What a vector represents."""

    CHUNK = "chunk"
    RULE = "rule"


class VectorMetadata(BaseModel):
    """
    Metadata attached to each vector.

    Rule vectors carry their source chunk ID so hits fold into chunks.
    """

    vector_id: str = Field(description="Chunk ID or rule ID")
    kind: VectorKind = Field(description="chunk or rule")
    document_id: str = Field(description="Owning document ID")
    chunk_id: str = Field(description="Chunk ID (source chunk for rules)")
    sequence: int = Field(ge=0, description="Sequence of the chunk")


class VectorEntry(BaseModel):
    """Vector with its text and metadata, ready for upsert."""

    vector: list[float] = Field(description="Embedding vector")
    text: str = Field(description="Text the vector was computed from")
    metadata: VectorMetadata


class VectorSearchResult(BaseModel):
    """Single result from vector search."""

    metadata: VectorMetadata = Field(description="Vector metadata")
    content: str = Field(description="Indexed text")
    distance: float = Field(description="Squared L2 distance, lower is closer")
