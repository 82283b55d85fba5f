"""
Extracted rule CRUD operations.

Dependencies: sqlalchemy, regulex.boundary.db.models
System role: Rule persistence
"""

from typing import Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from regulex.boundary.db.CRUD.base_crud import BaseCRUD
from regulex.boundary.db.models.rule_model import ExtractedRuleModel


class RuleCRUD(BaseCRUD[ExtractedRuleModel]):
    """CRUD operations for ExtractedRuleModel."""

    def __init__(self) -> None:
        """Initialize RuleCRUD with ExtractedRuleModel."""
        super().__init__(ExtractedRuleModel)

    async def get_by_chunk(self, session: AsyncSession, chunk_id: str) -> Sequence[ExtractedRuleModel]:
        """Rules extracted from one chunk, in ID order."""
        stmt = (
            select(ExtractedRuleModel)
            .where(ExtractedRuleModel.source_chunk_id == chunk_id)
            .order_by(ExtractedRuleModel.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_document(self, session: AsyncSession, document_id: str) -> Sequence[ExtractedRuleModel]:
        """Rules of a document ordered by source sequence."""
        stmt = (
            select(ExtractedRuleModel)
            .where(ExtractedRuleModel.document_id == document_id)
            .order_by(ExtractedRuleModel.source_sequence, ExtractedRuleModel.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def delete_by_chunk(self, session: AsyncSession, chunk_id: str) -> int:
        """Delete rules of one chunk; returns rows deleted."""
        stmt = delete(ExtractedRuleModel).where(ExtractedRuleModel.source_chunk_id == chunk_id)
        result = await session.execute(stmt)
        return result.rowcount

    async def delete_by_document(self, session: AsyncSession, document_id: str) -> int:
        """Delete rules of a document; returns rows deleted."""
        stmt = delete(ExtractedRuleModel).where(ExtractedRuleModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.rowcount

    async def set_embedding_id(self, session: AsyncSession, id: str, embedding_id: str) -> bool:
        """
        Record a rule's vector ID if it has none yet.

        Returns:
            True if the ID was written, False if already set or rule missing
        """
        stmt = (
            update(ExtractedRuleModel)
            .where(ExtractedRuleModel.id == id, ExtractedRuleModel.embedding_id.is_(None))
            .values(embedding_id=embedding_id)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1


rule_crud = RuleCRUD()
