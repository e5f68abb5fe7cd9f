"""Library-wide configuration using pydantic-settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .application.events import EventStore, InMemoryEventStore, JSONSerializer, Serializer


class EventSourceSettings(BaseSettings):
    """Settings selecting and configuring the store and serializer.

    All settings can be configured via environment variables with the
    EVENTFOLD_ prefix. For example:
    - EVENTFOLD_STORE=dynamodb
    - EVENTFOLD_TABLE_NAME=orders
    - EVENTFOLD_EVENTS_PER_ITEM=10

    Example:
        >>> settings = EventSourceSettings()
        >>> repository = Repository(
        ...     Order,
        ...     store=build_store(settings),
        ...     serializer=build_serializer(settings),
        ... )
    """

    store: Literal["memory", "dynamodb", "sql"] = "memory"
    serializer: Literal["json"] = "json"
    table_name: str = "events"

    # DynamoDB
    events_per_item: int = Field(default=1, ge=1)
    hash_key: str = "key"
    range_key: str = "partition"
    region: str = "us-east-1"
    endpoint_url: str | None = None

    # SQL
    database_url: str | None = None
    dialect: Literal["qmark", "numeric_dollar", "format"] | None = None

    debug: bool = False

    model_config = SettingsConfigDict(env_prefix="EVENTFOLD_")


def build_serializer(settings: EventSourceSettings | None = None) -> Serializer:
    """Create the serializer selected by the settings."""
    settings = settings or EventSourceSettings()
    if settings.serializer == "json":
        return JSONSerializer()
    raise ValueError(f"unknown serializer {settings.serializer!r}")


def build_store(settings: EventSourceSettings | None = None) -> EventStore:
    """Create the event store selected by the settings.

    Integration packages are imported only when selected.
    """
    settings = settings or EventSourceSettings()

    if settings.debug:
        from .debug import enable_debug

        enable_debug()

    if settings.store == "memory":
        return InMemoryEventStore()

    if settings.store == "dynamodb":
        from .integrations.dynamodb import DynamoDBConfiguration

        return DynamoDBConfiguration(
            table_name=settings.table_name,
            region=settings.region,
            endpoint_url=settings.endpoint_url,
            hash_key=settings.hash_key,
            range_key=settings.range_key,
            events_per_item=settings.events_per_item,
        ).store

    if settings.store == "sql":
        from .integrations.sql import Dialect, SQLConfiguration

        if settings.database_url is None:
            raise ValueError("database_url is required for the sql store")
        return SQLConfiguration(
            database_url=settings.database_url,
            table_name=settings.table_name,
            dialect=Dialect(settings.dialect) if settings.dialect else None,
        ).store

    raise ValueError(f"unknown store {settings.store!r}")
