"""
Shared test fixtures and configuration for entire test suite.

Provides: Settings, file-backed SQLite store, registered document, recording sleep
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import pytest

from regulex.configs import (
    ChunkingSettings,
    DatabaseSettings,
    QualitySettings,
    RetrievalSettings,
    SchedulerSettings,
    Settings,
)
from tests.fakes import RecordingSleep


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings bound to a temp SQLite file with fast scheduler defaults."""
    return Settings(
        database=DatabaseSettings(url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"),
        chunking=ChunkingSettings(),
        scheduler=SchedulerSettings(extraction_timeout_seconds=5.0),
        quality=QualitySettings(),
        retrieval=RetrievalSettings(persist_directory=None),
    )


@pytest.fixture
async def session_factory(settings: Settings):
    """
    Create a file-backed SQLite async database for testing.

    Yields:
        async_sessionmaker: Session factory over a fresh schema
    """
    from regulex.boundary.db import create_all_tables, drop_all_tables, get_async_engine, get_async_session_factory

    engine = get_async_engine(settings.database)
    await create_all_tables(engine)
    yield get_async_session_factory(engine)
    await drop_all_tables(engine)
    await engine.dispose()


@pytest.fixture
async def store(session_factory):
    """RuleStore over the test database."""
    from regulex.boundary.db import RuleStore

    return RuleStore(session_factory)


@pytest.fixture
async def document(store):
    """Registered plain-text document."""
    return await store.create_document("finance_act.txt", "finance_act.txt")


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
