"""
Document processing pipeline for rule extraction.

Structure analysis, chunk planning, overlap stitching, scheduled extraction,
quality review and indexing of regulatory text. The orchestrator lives in
`regulex.core.document_processing.entrypoint`; the package root only exports
domain models so the persistence layer can import them without loading the
pipeline.

Dependencies: pydantic, tenacity, regulex.boundary
System role: Document processing pipeline entrypoint
"""

from .models import DocumentChunk, ExtractedRule, ProcessingResult, RankedChunk

__all__ = [
    "DocumentChunk",
    "ExtractedRule",
    "ProcessingResult",
    "RankedChunk",
]
