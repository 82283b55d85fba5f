"""
Vector database boundary layer.

Provides the FAISS similarity index and vector schemas.

Dependencies: faiss, langchain_community
System role: Vector index adapter for chunk-aware retrieval
"""

from regulex.boundary.vdb.faiss_store import FAISSVectorIndex
from regulex.boundary.vdb.vector_schemas import (
    VectorEntry,
    VectorKind,
    VectorMetadata,
    VectorSearchResult,
)

__all__ = [
    "FAISSVectorIndex",
    "VectorEntry",
    "VectorKind",
    "VectorMetadata",
    "VectorSearchResult",
]
