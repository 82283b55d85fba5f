"""
Models for the document processing pipeline.

Exports: Section, DocumentChunk, Document, ExtractedText, RuleDraft, ExtractedRule,
ChunkProcessingStats, QualityReport, ProcessingResult, RankedChunk
"""

from .chunk import ChunkStatus, ContentType, DocumentChunk, Section, chunk_id_for
from .document import Document, DocumentStatus
from .extracted_text import ExtractedText, StructuralHints
from .results import ChunkProcessingStats, ProcessingResult, QualityReport
from .retrieval import RankedChunk
from .rule import ExtractedRule, RuleDraft, rule_id_for

__all__ = [
    "ChunkProcessingStats",
    "ChunkStatus",
    "ContentType",
    "Document",
    "DocumentChunk",
    "DocumentStatus",
    "ExtractedRule",
    "ExtractedText",
    "ProcessingResult",
    "QualityReport",
    "RankedChunk",
    "RuleDraft",
    "Section",
    "StructuralHints",
    "chunk_id_for",
    "rule_id_for",
]
