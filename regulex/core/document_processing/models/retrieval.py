"""
Retrieval result model.

Dependencies: pydantic
System role: Return type for chunk-aware similarity search
"""

from pydantic import BaseModel, Field

from regulex.core.document_processing.models.chunk import DocumentChunk


class RankedChunk(BaseModel):
    """Search hit with its neighbouring context chunks."""

    chunk: DocumentChunk
    distance: float = Field(description="Distance to the query vector, lower is closer")
    rank: int = Field(ge=1, description="1-based rank")
    neighbors: list[DocumentChunk] = Field(default_factory=list, description="Adjacent context chunks")
