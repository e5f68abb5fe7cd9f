"""SQL configuration using pydantic-settings."""

from functools import cached_property

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from .dialect import Dialect
from .store import SQLEventStore


class SQLConfiguration(BaseSettings):
    """Configuration and factory for SQL resources.

    All settings can be configured via environment variables with the
    EVENTFOLD_SQL_ prefix. For example:
    - EVENTFOLD_SQL_DATABASE_URL=postgresql+asyncpg://localhost/app
    - EVENTFOLD_SQL_TABLE_NAME=domain_events

    Attributes:
        database_url: SQLAlchemy async database URL.
        table_name: Table holding the records.
        dialect: Placeholder style; derived from the driver when unset.
        echo: Log every statement through SQLAlchemy's logger.
    """

    database_url: str = "sqlite+aiosqlite:///events.db"
    table_name: str = "events"
    dialect: Dialect | None = None
    echo: bool = False

    model_config = SettingsConfigDict(env_prefix="EVENTFOLD_SQL_")

    @cached_property
    def engine(self) -> AsyncEngine:
        """Get the async engine.

        The engine is lazily created and cached for reuse.
        """
        return create_async_engine(self.database_url, echo=self.echo)

    @cached_property
    def store(self) -> SQLEventStore:
        """Get the event store bound to the configured table."""
        return SQLEventStore(self.engine, self.table_name, self.dialect)

    async def on_shutdown(self) -> None:
        """Dispose of the engine's connection pool if it was created."""
        if "engine" in self.__dict__:
            await self.engine.dispose()
