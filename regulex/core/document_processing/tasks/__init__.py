"""
Task modules for the document processing pipeline.

Exports: StructureAnalyzer, ChunkPlanner, OverlapStitcher, ExtractionScheduler,
RetryPolicy, QualityValidator, EmbeddingIndexer
"""

from .chunking_task import ChunkPlanner
from .embedding_task import EmbeddingIndexer, IndexingSummary
from .extraction_task import (
    AttemptOutcome,
    ChunkOutcome,
    ExtractionScheduler,
    RetryPolicy,
    quadratic_backoff,
)
from .overlap_task import OverlapStitcher
from .quality_task import QualityValidator, cross_chunk_consistency, weighted_score
from .structure_task import StructureAnalyzer

__all__ = [
    "AttemptOutcome",
    "ChunkOutcome",
    "ChunkPlanner",
    "EmbeddingIndexer",
    "ExtractionScheduler",
    "IndexingSummary",
    "OverlapStitcher",
    "QualityValidator",
    "RetryPolicy",
    "StructureAnalyzer",
    "cross_chunk_consistency",
    "quadratic_backoff",
    "weighted_score",
]
