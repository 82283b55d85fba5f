"""
Primary-key operations shared by the rule store tables.

Every table keyed by a string `id` (documents, chunks, rules) gets these
through a subclass; stats rows add their own lookups. Methods never commit:
the caller's session owns the transaction.

Dependencies: sqlalchemy
System role: Foundation for all database CRUD operations
"""

from typing import Generic, Sequence, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from regulex.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Keyed insert, lookup, update and delete for one ORM model.

    Attributes:
        model: ORM class the statements target
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **kwargs) -> ModelT:
        """
        Insert one row and return it with server and default values loaded.

        Args:
            session: Async database session
            **kwargs: Column values

        Returns:
            ModelT: The flushed and refreshed instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def create_many(self, session: AsyncSession, rows: list[dict]) -> int:
        """Insert rows in one flush and return how many were added."""
        session.add_all([self.model(**row) for row in rows])
        await session.flush()
        return len(rows)

    async def get_by_id(self, session: AsyncSession, id: str) -> ModelT | None:
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by_ids(self, session: AsyncSession, ids: list[str]) -> Sequence[ModelT]:
        """Rows whose id is in ids, in no particular order. Missing ids are skipped."""
        if not ids:
            return []
        result = await session.execute(select(self.model).where(self.model.id.in_(ids)))
        return result.scalars().all()

    async def update_by_id(self, session: AsyncSession, id: str, **kwargs) -> bool:
        """
        Set columns on one row.

        Args:
            session: Async database session
            id: Row id
            **kwargs: Columns to set

        Returns:
            bool: False when no row has that id
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id)
            .values(**kwargs)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def delete_by_id(self, session: AsyncSession, id: str) -> bool:
        """Delete one row; False when it did not exist."""
        result = await session.execute(delete(self.model).where(self.model.id == id))
        return result.rowcount > 0
