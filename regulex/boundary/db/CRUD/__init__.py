"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from regulex.boundary.db.CRUD import chunk_crud

    async with session_factory() as session:
        moved = await chunk_crud.transition_status(session, chunk_id, expected, new)
"""

from regulex.boundary.db.CRUD.base_crud import BaseCRUD
from regulex.boundary.db.CRUD.chunk_crud import ChunkCRUD, chunk_crud
from regulex.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from regulex.boundary.db.CRUD.rule_crud import RuleCRUD, rule_crud
from regulex.boundary.db.CRUD.stats_crud import StatsCRUD, stats_crud

__all__ = [
    "BaseCRUD",
    "ChunkCRUD",
    "chunk_crud",
    "DocumentCRUD",
    "document_crud",
    "RuleCRUD",
    "rule_crud",
    "StatsCRUD",
    "stats_crud",
]
