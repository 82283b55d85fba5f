"""
Database boundary layer: ORM models, CRUD operations, connection management
and the RuleStore facade.

Exports:
  - Base, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), create_all_tables(): Connection management
  - DocumentModel, DocumentChunkModel, ExtractedRuleModel, ChunkProcessingStatsModel
  - document_crud, chunk_crud, rule_crud, stats_crud: CRUD operation singletons
  - RuleStore: Transactional facade returning domain models

Dependencies: sqlalchemy, regulex.configs
System role: Database adapter providing persistent pipeline state
"""

from regulex.boundary.db.base import Base, TimestampMixin
from regulex.boundary.db.connection import (
    create_all_tables,
    drop_all_tables,
    get_async_engine,
    get_async_session_factory,
)
from regulex.boundary.db.models import (
    ChunkProcessingStatsModel,
    DocumentChunkModel,
    DocumentModel,
    ExtractedRuleModel,
)
from regulex.boundary.db.CRUD import (
    BaseCRUD,
    ChunkCRUD,
    DocumentCRUD,
    RuleCRUD,
    StatsCRUD,
    chunk_crud,
    document_crud,
    rule_crud,
    stats_crud,
)
from regulex.boundary.db.rule_store import RuleStore

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Connection
    "create_all_tables",
    "drop_all_tables",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "ChunkProcessingStatsModel",
    "DocumentChunkModel",
    "DocumentModel",
    "ExtractedRuleModel",
    # CRUD classes
    "BaseCRUD",
    "ChunkCRUD",
    "DocumentCRUD",
    "RuleCRUD",
    "StatsCRUD",
    # CRUD singletons
    "chunk_crud",
    "document_crud",
    "rule_crud",
    "stats_crud",
    # Facade
    "RuleStore",
]
