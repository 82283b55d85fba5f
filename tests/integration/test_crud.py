"""
Test suite for the keyed CRUD helpers.

Mocked-session tests pin flush ordering; the rest run against SQLite.

System role: Verification of generic database layer foundation
"""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from regulex.boundary.db.CRUD import document_crud
from regulex.core.document_processing.models import DocumentStatus


@pytest.fixture
def mock_session() -> AsyncSession:
    return AsyncMock(spec=AsyncSession)


class TestCreate:
    """Test suite for BaseCRUD.create() and create_many()."""

    async def test_create_should_flush_before_refresh(self, mock_session) -> None:
        """Test the row is flushed so defaults exist before it is refreshed."""
        # Arrange
        calls = []
        mock_session.flush.side_effect = lambda: calls.append("flush")
        mock_session.refresh.side_effect = lambda obj: calls.append("refresh")

        # Act
        await document_crud.create(mock_session, filename="act.txt", source_uri="act.txt")

        # Assert
        mock_session.add.assert_called_once()
        assert calls == ["flush", "refresh"]

    async def test_create_many_should_add_all_rows_in_one_flush(self, mock_session) -> None:
        # Act
        count = await document_crud.create_many(
            mock_session,
            [{"filename": "a.txt", "source_uri": "a.txt"}, {"filename": "b.txt", "source_uri": "b.txt"}],
        )

        # Assert
        assert count == 2
        (rows,) = mock_session.add_all.call_args.args
        assert [row.filename for row in rows] == ["a.txt", "b.txt"]
        mock_session.flush.assert_awaited_once()

    async def test_create_should_fill_defaults(self, session_factory) -> None:
        # Act
        async with session_factory() as session:
            row = await document_crud.create(session, filename="act.txt", source_uri="act.txt")
            await session.commit()

        # Assert
        assert len(row.id) == 32
        assert row.status == DocumentStatus.UPLOADED
        assert row.total_chunks == 0
        assert row.created_at is not None


class TestKeyedAccess:
    """Test suite for lookups, updates and deletes by id."""

    async def test_get_by_ids_should_skip_missing(self, session_factory) -> None:
        # Arrange
        async with session_factory() as session:
            first = await document_crud.create(session, filename="a.txt", source_uri="a.txt")
            second = await document_crud.create(session, filename="b.txt", source_uri="b.txt")
            await session.commit()

        # Act
        async with session_factory() as session:
            rows = await document_crud.get_by_ids(session, [first.id, "missing", second.id])
            empty = await document_crud.get_by_ids(session, [])

        # Assert
        assert {row.id for row in rows} == {first.id, second.id}
        assert empty == []

    async def test_update_by_id_should_report_missing_rows(self, session_factory) -> None:
        # Arrange
        async with session_factory() as session:
            row = await document_crud.create(session, filename="a.txt", source_uri="a.txt")
            await session.commit()

        # Act
        async with session_factory() as session:
            updated = await document_crud.update_by_id(session, row.id, total_chunks=4)
            missing = await document_crud.update_by_id(session, "missing", total_chunks=4)
            await session.commit()

        # Assert
        assert (updated, missing) == (True, False)
        async with session_factory() as session:
            assert (await document_crud.get_by_id(session, row.id)).total_chunks == 4

    async def test_delete_by_id_should_remove_once(self, session_factory) -> None:
        # Arrange
        async with session_factory() as session:
            row = await document_crud.create(session, filename="a.txt", source_uri="a.txt")
            await session.commit()

        # Act
        async with session_factory() as session:
            first = await document_crud.delete_by_id(session, row.id)
            second = await document_crud.delete_by_id(session, row.id)
            await session.commit()

        # Assert
        assert (first, second) == (True, False)
