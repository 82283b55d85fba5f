"""
Database models package.

Exports:
  - DocumentModel: Document ORM model
  - DocumentChunkModel: Chunk ORM model
  - ExtractedRuleModel: Rule ORM model
  - ChunkProcessingStatsModel: Per-chunk statistics ORM model

Dependencies: sqlalchemy, regulex.boundary.db.base
System role: Database model definitions for domain entities
"""

from regulex.boundary.db.models.document_model import DocumentModel
from regulex.boundary.db.models.chunk_model import DocumentChunkModel
from regulex.boundary.db.models.rule_model import ExtractedRuleModel
from regulex.boundary.db.models.stats_model import ChunkProcessingStatsModel

__all__ = [
    "DocumentModel",
    "DocumentChunkModel",
    "ExtractedRuleModel",
    "ChunkProcessingStatsModel",
]
