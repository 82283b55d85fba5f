"""
Document chunk CRUD operations.

Chunk status is changed only through transition_status, an atomic
compare-and-set: UPDATE ... WHERE id = :id AND status = :expected.

Dependencies: sqlalchemy, regulex.boundary.db.models
System role: Chunk persistence and lifecycle state
"""

from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from regulex.boundary.db.CRUD.base_crud import BaseCRUD
from regulex.boundary.db.models.chunk_model import DocumentChunkModel
from regulex.core.document_processing.models import ChunkStatus


class ChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """CRUD operations for DocumentChunkModel."""

    def __init__(self) -> None:
        """Initialize ChunkCRUD with DocumentChunkModel."""
        super().__init__(DocumentChunkModel)

    async def get_by_document(self, session: AsyncSession, document_id: str) -> Sequence[DocumentChunkModel]:
        """
        Retrieve all chunks of a document ordered by sequence.

        Args:
            session: Async database session
            document_id: Owning document ID

        Returns:
            Sequence of DocumentChunkModels in sequence order
        """
        stmt = (
            select(DocumentChunkModel)
            .where(DocumentChunkModel.document_id == document_id)
            .order_by(DocumentChunkModel.chunk_sequence)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_status(
        self,
        session: AsyncSession,
        status: ChunkStatus,
        limit: int | None = None,
    ) -> Sequence[DocumentChunkModel]:
        """Retrieve chunks in a given status, ordered by document and sequence."""
        stmt = (
            select(DocumentChunkModel)
            .where(DocumentChunkModel.status == status)
            .order_by(DocumentChunkModel.document_id, DocumentChunkModel.chunk_sequence)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def transition_status(
        self,
        session: AsyncSession,
        id: str,
        expected: ChunkStatus,
        new: ChunkStatus,
    ) -> bool:
        """
        Compare-and-set a chunk's status.

        Args:
            session: Async database session
            id: Chunk ID
            expected: Status the chunk must currently have
            new: Status to set

        Returns:
            True if exactly one row changed, False if the chunk is missing or
            in a different status
        """
        stmt = (
            update(DocumentChunkModel)
            .where(DocumentChunkModel.id == id, DocumentChunkModel.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    async def reset_status(
        self,
        session: AsyncSession,
        document_id: str,
        expected: ChunkStatus,
        new: ChunkStatus,
    ) -> int:
        """Move every chunk of a document from expected to new; returns rows changed."""
        stmt = (
            update(DocumentChunkModel)
            .where(DocumentChunkModel.document_id == document_id, DocumentChunkModel.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def increment_retry_count(self, session: AsyncSession, id: str) -> bool:
        """Atomically add one to a chunk's retry counter."""
        stmt = (
            update(DocumentChunkModel)
            .where(DocumentChunkModel.id == id)
            .values(retry_count=DocumentChunkModel.retry_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1

    async def delete_by_document(self, session: AsyncSession, document_id: str) -> int:
        """Delete all chunks of a document; returns rows deleted."""
        stmt = delete(DocumentChunkModel).where(DocumentChunkModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.rowcount


chunk_crud = ChunkCRUD()
