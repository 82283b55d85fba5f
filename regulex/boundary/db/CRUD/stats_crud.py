"""
Chunk processing statistics CRUD operations.

Dependencies: sqlalchemy, regulex.boundary.db.models
System role: Processing metrics persistence
"""

from typing import Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from regulex.boundary.db.CRUD.base_crud import BaseCRUD
from regulex.boundary.db.models.chunk_model import DocumentChunkModel
from regulex.boundary.db.models.stats_model import ChunkProcessingStatsModel


class StatsCRUD(BaseCRUD[ChunkProcessingStatsModel]):
    """CRUD operations for ChunkProcessingStatsModel."""

    def __init__(self) -> None:
        """Initialize StatsCRUD with ChunkProcessingStatsModel."""
        super().__init__(ChunkProcessingStatsModel)

    async def get_by_chunk(self, session: AsyncSession, chunk_id: str) -> Sequence[ChunkProcessingStatsModel]:
        """Stats rows of one chunk, oldest first."""
        stmt = (
            select(ChunkProcessingStatsModel)
            .where(ChunkProcessingStatsModel.chunk_id == chunk_id)
            .order_by(ChunkProcessingStatsModel.finished_at)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_document(self, session: AsyncSession, document_id: str) -> int:
        """Delete stats of every chunk of a document; returns rows deleted."""
        chunk_ids = select(DocumentChunkModel.id).where(DocumentChunkModel.document_id == document_id)
        stmt = delete(ChunkProcessingStatsModel).where(ChunkProcessingStatsModel.chunk_id.in_(chunk_ids))
        result = await session.execute(stmt)
        return result.rowcount


stats_crud = StatsCRUD()
