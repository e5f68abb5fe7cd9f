"""DynamoDB configuration using pydantic-settings."""

from functools import cached_property
from typing import Any

import boto3
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .store import DEFAULT_HASH_KEY, DEFAULT_RANGE_KEY, DEFAULT_REGION, DynamoDBEventStore


class DynamoDBConfiguration(BaseSettings):
    """Configuration and factory for DynamoDB resources.

    All settings can be configured via environment variables with the
    EVENTFOLD_DYNAMODB_ prefix. For example:
    - EVENTFOLD_DYNAMODB_TABLE_NAME=orders
    - EVENTFOLD_DYNAMODB_EVENTS_PER_ITEM=10
    - EVENTFOLD_DYNAMODB_ENDPOINT_URL=http://localhost:8000

    Attributes:
        table_name: Table holding the events.
        region: AWS region of the table.
        endpoint_url: Optional endpoint override, e.g. DynamoDB Local.
        hash_key: Attribute holding the aggregate id.
        range_key: Attribute holding the partition number.
        events_per_item: Number of event slots per row.

    Example:
        >>> config = DynamoDBConfiguration(table_name="orders")
        >>> repository = Repository(Order, store=config.store)
    """

    table_name: str = "events"
    region: str = DEFAULT_REGION
    endpoint_url: str | None = None
    hash_key: str = DEFAULT_HASH_KEY
    range_key: str = DEFAULT_RANGE_KEY
    events_per_item: int = Field(default=1, ge=1)

    model_config = SettingsConfigDict(env_prefix="EVENTFOLD_DYNAMODB_")

    @cached_property
    def client(self) -> Any:
        """Get the low-level DynamoDB client.

        The client is lazily created and cached for reuse.
        """
        return boto3.client("dynamodb", region_name=self.region, endpoint_url=self.endpoint_url)

    @cached_property
    def store(self) -> DynamoDBEventStore:
        """Get the event store bound to the configured table."""
        return DynamoDBEventStore(
            self.client,
            self.table_name,
            hash_key=self.hash_key,
            range_key=self.range_key,
            events_per_item=self.events_per_item,
        )
