"""DynamoDB implementation of EventStore.

Events are grouped into rows of ``events_per_item`` slots keyed by
``(aggregate_id, partition)``. A save issues one conditional ``UpdateItem``
per touched row; the condition requires every written slot to be absent, so a
version can only ever be written once.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from ...application.events import EventStore, History, Record, check_batch
from ...domain.exceptions import (
    AggregateNotFoundError,
    DuplicateVersionError,
    OperationCancelledError,
    StorageError,
)
from .keys import is_slot, select_partition, slot_name, version_and_at

LOGGER = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"
DEFAULT_HASH_KEY = "key"
DEFAULT_RANGE_KEY = "partition"

REVISION = "revision"

T = TypeVar("T")


def partition_records(records: tuple[Record, ...], events_per_item: int) -> dict[int, list[Record]]:
    """Group records by the row they belong in."""
    partitions: dict[int, list[Record]] = {}
    for record in records:
        partitions.setdefault(select_partition(record.version, events_per_item), []).append(record)
    return partitions


def make_update_item_inputs(
    table_name: str,
    hash_key: str,
    range_key: str,
    events_per_item: int,
    aggregate_id: str,
    *records: Record,
) -> list[dict[str, Any]]:
    """Build one ``UpdateItem`` request per touched row, in ascending row order."""
    inputs = []
    partitions = partition_records(records, events_per_item)
    for partition in sorted(partitions):
        names = {"#revision": REVISION}
        values: dict[str, Any] = {":one": {"N": "1"}}
        conditions = []
        assignments = []

        for record in partitions[partition]:
            name_ref = f"#_{record.version}"
            value_ref = f":_{record.version}"
            names[name_ref] = slot_name(record.version, record.at)
            values[value_ref] = {"B": record.data}
            conditions.append(f"attribute_not_exists({name_ref})")
            assignments.append(f"{name_ref} = {value_ref}")

        inputs.append(
            {
                "TableName": table_name,
                "Key": {
                    hash_key: {"S": aggregate_id},
                    range_key: {"N": str(partition)},
                },
                "ConditionExpression": " AND ".join(conditions),
                "UpdateExpression": "ADD #revision :one SET " + ", ".join(assignments),
                "ExpressionAttributeNames": names,
                "ExpressionAttributeValues": values,
            }
        )
    return inputs


def make_query_input(
    table_name: str,
    hash_key: str,
    range_key: str,
    aggregate_id: str,
    partition: int,
) -> dict[str, Any]:
    """Build the consistent ``Query`` request for an aggregate's rows.

    A partition of 0 reads every row; otherwise only rows up to and including
    ``partition`` are read.
    """
    query: dict[str, Any] = {
        "TableName": table_name,
        "Select": "ALL_ATTRIBUTES",
        "ConsistentRead": True,
        "KeyConditionExpression": "#key = :key",
        "ExpressionAttributeNames": {"#key": hash_key},
        "ExpressionAttributeValues": {":key": {"S": aggregate_id}},
    }
    if partition:
        query["KeyConditionExpression"] = "#key = :key AND #partition <= :partition"
        query["ExpressionAttributeNames"]["#partition"] = range_key
        query["ExpressionAttributeValues"][":partition"] = {"N": str(partition)}
    return query


class DynamoDBEventStore(EventStore):
    """EventStore backed by a DynamoDB table.

    The client is the low-level boto3 DynamoDB client. Its calls block, so
    they run in a worker thread.

    A batch that spans several rows is written row by row in ascending
    order. If a later row fails its condition, the rows already written stay
    written and the save reports DuplicateVersionError.

    Examples:
        >>> client = boto3.client("dynamodb", region_name="us-east-1")
        >>> store = DynamoDBEventStore(client, "events", events_per_item=10)
        >>> await store.save("u1", *records)
        >>> history = await store.fetch("u1")
    """

    def __init__(
        self,
        client: Any,
        table_name: str,
        *,
        hash_key: str = DEFAULT_HASH_KEY,
        range_key: str = DEFAULT_RANGE_KEY,
        events_per_item: int = 1,
    ):
        if events_per_item < 1:
            raise ValueError(f"events_per_item must be at least 1, got {events_per_item}")
        self.client = client
        self.table_name = table_name
        self.hash_key = hash_key
        self.range_key = range_key
        self.events_per_item = events_per_item

    async def _call(self, func: Callable[..., T], **kwargs: Any) -> T:
        try:
            return await asyncio.to_thread(func, **kwargs)
        except asyncio.CancelledError as e:
            raise OperationCancelledError(f"{func.__name__} on {self.table_name} was cancelled") from e

    async def save(self, aggregate_id: str, *records: Record) -> None:
        if not records:
            return

        check_batch(aggregate_id, records)
        inputs = make_update_item_inputs(
            self.table_name,
            self.hash_key,
            self.range_key,
            self.events_per_item,
            aggregate_id,
            *records,
        )

        for update in inputs:
            LOGGER.debug(
                "UpdateItem",
                extra={"aggregate_id": aggregate_id, "partition": update["Key"][self.range_key]["N"]},
            )
            try:
                await self._call(self.client.update_item, **update)
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                    LOGGER.warning(
                        "Duplicate version rejected",
                        extra={"aggregate_id": aggregate_id, "table": self.table_name},
                    )
                    raise DuplicateVersionError(aggregate_id) from e
                raise StorageError(f"save failed for aggregate {aggregate_id!r}: {e}") from e
            except BotoCoreError as e:
                raise StorageError(f"save failed for aggregate {aggregate_id!r}: {e}") from e

    async def fetch(self, aggregate_id: str, version: int = 0) -> History:
        query = make_query_input(
            self.table_name,
            self.hash_key,
            self.range_key,
            aggregate_id,
            select_partition(version, self.events_per_item),
        )

        history: History = []
        while True:
            try:
                page = await self._call(self.client.query, **query)
            except (ClientError, BotoCoreError) as e:
                raise StorageError(f"fetch failed for aggregate {aggregate_id!r}: {e}") from e

            for item in page.get("Items", []):
                for name, value in item.items():
                    if not is_slot(name):
                        continue
                    record_version, at = version_and_at(name)
                    if version and record_version > version:
                        continue
                    history.append(Record(version=record_version, at=at, data=bytes(value["B"])))

            last_key = page.get("LastEvaluatedKey")
            if not last_key:
                break
            query["ExclusiveStartKey"] = last_key

        if not history:
            raise AggregateNotFoundError(aggregate_id)

        history.sort(key=lambda record: record.version)
        LOGGER.debug("Fetched records", extra={"aggregate_id": aggregate_id, "count": len(history)})
        return history
