"""SQLAlchemy implementation of EventStore.

Records live in a single table with a unique index on ``(id, version)``; the
database itself rejects duplicate versions. Statements are issued as driver
SQL so the same templates serve every supported database.
"""

import asyncio
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from ...application.events import EventStore, History, Record, check_batch
from ...domain.exceptions import (
    AggregateNotFoundError,
    DuplicateVersionError,
    OperationCancelledError,
    StorageError,
)
from .dialect import INSERT, SELECT, SELECT_VERSION, Dialect, with_table_name

LOGGER = logging.getLogger(__name__)


class SQLEventStore(EventStore):
    """EventStore backed by a relational database.

    The table must already exist; see
    :func:`~eventfold.integrations.sql.infra.create_table`.

    Examples:
        >>> engine = create_async_engine("sqlite+aiosqlite:///events.db")
        >>> await create_table(engine, "events", Flavor.SQLITE)
        >>> store = SQLEventStore(engine, "events")
    """

    def __init__(
        self,
        engine: AsyncEngine,
        table_name: str = "events",
        dialect: Dialect | None = None,
    ):
        """Initialize the SQL event store.

        Args:
            engine: SQLAlchemy async engine.
            table_name: Table holding the records.
            dialect: Placeholder style. Derived from the engine's driver when
                omitted.
        """
        self.engine = engine
        self.table_name = table_name
        self.dialect = dialect or Dialect.from_paramstyle(engine.dialect.paramstyle)
        self.insert_sql = self.dialect.render(with_table_name(INSERT, table_name))
        self.select_sql = self.dialect.render(with_table_name(SELECT, table_name))
        self.select_version_sql = self.dialect.render(with_table_name(SELECT_VERSION, table_name))

    async def save(self, aggregate_id: str, *records: Record) -> None:
        if not records:
            return

        check_batch(aggregate_id, records)
        try:
            async with self.engine.begin() as conn:
                for record in records:
                    await conn.exec_driver_sql(
                        self.insert_sql,
                        (aggregate_id, record.version, record.data, record.at),
                    )
        except IntegrityError as e:
            LOGGER.warning(
                "Duplicate version rejected",
                extra={"aggregate_id": aggregate_id, "table": self.table_name},
            )
            raise DuplicateVersionError(aggregate_id) from e
        except SQLAlchemyError as e:
            raise StorageError(f"save failed for aggregate {aggregate_id!r}: {e}") from e
        except asyncio.CancelledError as e:
            raise OperationCancelledError(f"save for aggregate {aggregate_id!r} was cancelled") from e

        LOGGER.debug("Saved records", extra={"aggregate_id": aggregate_id, "count": len(records)})

    async def fetch(self, aggregate_id: str, version: int = 0) -> History:
        if version:
            sql, parameters = self.select_version_sql, (aggregate_id, version)
        else:
            sql, parameters = self.select_sql, (aggregate_id,)

        try:
            async with self.engine.connect() as conn:
                result = await conn.exec_driver_sql(sql, parameters)
                rows = result.all()
        except SQLAlchemyError as e:
            raise StorageError(f"fetch failed for aggregate {aggregate_id!r}: {e}") from e
        except asyncio.CancelledError as e:
            raise OperationCancelledError(f"fetch for aggregate {aggregate_id!r} was cancelled") from e

        if not rows:
            raise AggregateNotFoundError(aggregate_id)

        LOGGER.debug("Fetched records", extra={"aggregate_id": aggregate_id, "count": len(rows)})
        return [Record(version=int(row[0]), at=int(row[2]), data=bytes(row[1])) for row in rows]
