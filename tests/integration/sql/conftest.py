"""SQL fixtures backed by a file-based SQLite database through aiosqlite."""

import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from eventfold.integrations.sql import Flavor, SQLEventStore, create_table


@pytest_asyncio.fixture
async def sql_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'events.db'}")
    await create_table(engine, "events", Flavor.SQLITE)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(sql_engine) -> SQLEventStore:
    return SQLEventStore(sql_engine, "events")
