"""Table provisioning for the DynamoDB event store."""

import asyncio
from typing import Any

from .store import DEFAULT_HASH_KEY, DEFAULT_RANGE_KEY


def make_create_table_input(
    table_name: str,
    read_capacity: int,
    write_capacity: int,
    *,
    hash_key: str = DEFAULT_HASH_KEY,
    range_key: str = DEFAULT_RANGE_KEY,
    streams: bool = False,
) -> dict[str, Any]:
    """Build the ``CreateTable`` request for an event table.

    Args:
        table_name: Name of the table to create.
        read_capacity: Provisioned read capacity units.
        write_capacity: Provisioned write capacity units.
        hash_key: Attribute holding the aggregate id.
        range_key: Attribute holding the partition number.
        streams: Enable a stream with old and new images, as consumed by
            :func:`~eventfold.integrations.dynamodb.streams.raw_events`.
    """
    request: dict[str, Any] = {
        "TableName": table_name,
        "AttributeDefinitions": [
            {"AttributeName": hash_key, "AttributeType": "S"},
            {"AttributeName": range_key, "AttributeType": "N"},
        ],
        "KeySchema": [
            {"AttributeName": hash_key, "KeyType": "HASH"},
            {"AttributeName": range_key, "KeyType": "RANGE"},
        ],
        "ProvisionedThroughput": {
            "ReadCapacityUnits": read_capacity,
            "WriteCapacityUnits": write_capacity,
        },
    }
    if streams:
        request["StreamSpecification"] = {
            "StreamEnabled": True,
            "StreamViewType": "NEW_AND_OLD_IMAGES",
        }
    return request


async def create_table(
    client: Any,
    table_name: str,
    read_capacity: int = 5,
    write_capacity: int = 5,
    **kwargs: Any,
) -> dict[str, Any]:
    """Create an event table and wait until it exists."""
    request = make_create_table_input(table_name, read_capacity, write_capacity, **kwargs)
    response = await asyncio.to_thread(client.create_table, **request)
    waiter = client.get_waiter("table_exists")
    await asyncio.to_thread(waiter.wait, TableName=table_name)
    return response
