"""Table provisioning for the SQL event store."""

from enum import Enum

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine

from .dialect import with_table_name


class Flavor(str, Enum):
    """Database families with a known event table definition."""

    SQLITE = "sqlite"
    POSTGRES = "postgresql"
    MYSQL = "mysql"


_CREATE_TABLE = {
    Flavor.SQLITE: """
        CREATE TABLE IF NOT EXISTS {{ .TableName }} (
            "offset"  INTEGER PRIMARY KEY AUTOINCREMENT,
            id        VARCHAR(255) NOT NULL,
            version   INTEGER NOT NULL,
            data      BLOB NOT NULL,
            at        BIGINT NOT NULL
        )
    """,
    Flavor.POSTGRES: """
        CREATE TABLE IF NOT EXISTS {{ .TableName }} (
            "offset"  BIGSERIAL PRIMARY KEY NOT NULL,
            id        VARCHAR(255) NOT NULL,
            version   INTEGER NOT NULL,
            data      BYTEA NOT NULL,
            at        BIGINT NOT NULL
        )
    """,
    Flavor.MYSQL: """
        CREATE TABLE IF NOT EXISTS {{ .TableName }} (
            `offset`  BIGINT PRIMARY KEY NOT NULL AUTO_INCREMENT,
            id        VARCHAR(255) NOT NULL,
            version   INT NOT NULL,
            data      VARBINARY(8192) NOT NULL,
            at        BIGINT NOT NULL
        )
    """,
}

_UNIQUE_INDEX = {
    Flavor.SQLITE: "CREATE UNIQUE INDEX IF NOT EXISTS idx_{{ .TableName }} ON {{ .TableName }} (id, version)",
    Flavor.POSTGRES: "CREATE UNIQUE INDEX IF NOT EXISTS idx_{{ .TableName }} ON {{ .TableName }} (id, version)",
    Flavor.MYSQL: "CREATE UNIQUE INDEX idx_{{ .TableName }} ON {{ .TableName }} (id, version)",
}

# ER_DUP_KEYNAME: MySQL has no CREATE INDEX IF NOT EXISTS
_MYSQL_DUPLICATE_KEY_NAME = 1061


def create_table_statements(table_name: str, flavor: Flavor) -> list[str]:
    """Render the DDL for an event table."""
    return [
        with_table_name(_CREATE_TABLE[flavor], table_name),
        with_table_name(_UNIQUE_INDEX[flavor], table_name),
    ]


async def create_table(engine: AsyncEngine, table_name: str = "events", flavor: Flavor | None = None) -> None:
    """Create the event table and its unique index if they do not exist.

    Args:
        engine: SQLAlchemy async engine.
        table_name: Name of the table to create.
        flavor: Which DDL to use. Derived from the engine's dialect name when
            omitted.
    """
    flavor = flavor or Flavor(engine.dialect.name)
    create_sql, index_sql = create_table_statements(table_name, flavor)

    async with engine.begin() as conn:
        await conn.exec_driver_sql(create_sql)

    if flavor is not Flavor.MYSQL:
        async with engine.begin() as conn:
            await conn.exec_driver_sql(index_sql)
        return

    try:
        async with engine.begin() as conn:
            await conn.exec_driver_sql(index_sql)
    except OperationalError as e:
        if getattr(e.orig, "args", (None,))[0] != _MYSQL_DUPLICATE_KEY_NAME:
            raise
