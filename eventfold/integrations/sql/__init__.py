"""Relational database integration for eventfold.

Usage:
    >>> from eventfold.integrations.sql import SQLConfiguration, create_table
    >>>
    >>> config = SQLConfiguration(database_url="sqlite+aiosqlite:///events.db")
    >>> await create_table(config.engine, config.table_name)
    >>> repository = Repository(Order, store=config.store)
"""

from .config import SQLConfiguration
from .dialect import Dialect, with_table_name
from .infra import Flavor, create_table, create_table_statements
from .store import SQLEventStore

__all__ = [
    "SQLConfiguration",
    "SQLEventStore",
    "Dialect",
    "Flavor",
    "create_table",
    "create_table_statements",
    "with_table_name",
]
