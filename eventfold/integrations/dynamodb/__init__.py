"""DynamoDB integration for eventfold.

Usage:
    >>> from eventfold.integrations.dynamodb import DynamoDBConfiguration, create_table
    >>>
    >>> config = DynamoDBConfiguration(table_name="orders", events_per_item=10)
    >>> await create_table(config.client, config.table_name, streams=True)
    >>> repository = Repository(Order, store=config.store)
"""

from .config import DynamoDBConfiguration
from .infra import create_table, make_create_table_input
from .keys import is_slot, select_partition, slot_name, version_and_at, version_from_key
from .store import (
    DEFAULT_HASH_KEY,
    DEFAULT_RANGE_KEY,
    DEFAULT_REGION,
    DynamoDBEventStore,
    make_query_input,
    make_update_item_inputs,
)
from .streams import raw_events, table_name

__all__ = [
    "DynamoDBConfiguration",
    "DynamoDBEventStore",
    "DEFAULT_HASH_KEY",
    "DEFAULT_RANGE_KEY",
    "DEFAULT_REGION",
    "create_table",
    "make_create_table_input",
    "make_query_input",
    "make_update_item_inputs",
    "is_slot",
    "select_partition",
    "slot_name",
    "version_and_at",
    "version_from_key",
    "raw_events",
    "table_name",
]
