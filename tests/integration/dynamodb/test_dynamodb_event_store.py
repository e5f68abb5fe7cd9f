import pytest

from eventfold.application import JSONSerializer, Record, Repository
from eventfold.domain import DuplicateVersionError, ErrorCode, UnboundEventTypeError
from eventfold.integrations.dynamodb import DynamoDBEventStore, create_table, raw_events
from eventfold.testing import run_store_contract
from tests.fixtures.test_app import EmailChanged, User, UserCreated

TABLE_NAME = "events"

pytestmark = pytest.mark.integration


def created(aggregate_id: str) -> UserCreated:
    return UserCreated(id=aggregate_id, version=1, name="Jo", email="jo@example.com")


def email_changed(aggregate_id: str, version: int) -> EmailChanged:
    return EmailChanged(id=aggregate_id, version=version, email=f"{version}@example.com")


@pytest.mark.asyncio
async def test_store_contract(dynamodb_store):
    # Rows are written one UpdateItem at a time, so batches are not atomic
    await run_store_contract(dynamodb_store, atomic=False)


@pytest.mark.asyncio
async def test_store_contract_with_wide_rows(dynamodb_client):
    store = DynamoDBEventStore(dynamodb_client, TABLE_NAME, events_per_item=3)

    await run_store_contract(store, atomic=False)


@pytest.mark.asyncio
async def test_events_are_partitioned_across_rows(dynamodb_client, serializer):
    store = DynamoDBEventStore(dynamodb_client, TABLE_NAME, events_per_item=2)
    repository = Repository(User, store=store, serializer=serializer)

    await repository.save(created("a"), *[email_changed("a", v) for v in (2, 3, 4, 5)])

    items = dynamodb_client.scan(TableName=TABLE_NAME)["Items"]
    assert {int(item["partition"]["N"]) for item in items if item["key"]["S"] == "a"} == {0, 1, 2}

    user = await repository.load("a")
    assert user.version == 5
    assert user.email == "5@example.com"

    partial = await repository.load("a", version=3)
    assert partial.version == 3
    assert partial.email == "3@example.com"


@pytest.mark.asyncio
async def test_revision_counts_writes_to_a_row(dynamodb_client, serializer):
    store = DynamoDBEventStore(dynamodb_client, TABLE_NAME, events_per_item=10)
    repository = Repository(User, store=store, serializer=serializer)

    await repository.save(created("a"))
    await repository.save(email_changed("a", 2), email_changed("a", 3))

    item = dynamodb_client.get_item(
        TableName=TABLE_NAME, Key={"key": {"S": "a"}, "partition": {"N": "0"}}
    )["Item"]
    assert item["revision"] == {"N": "2"}


@pytest.mark.asyncio
async def test_concurrent_writer_gets_duplicate_version(dynamodb_store, serializer):
    repository = Repository(User, store=dynamodb_store, serializer=serializer)
    await repository.save(created("a"))

    with pytest.raises(DuplicateVersionError) as exc_info:
        await repository.save(
            UserCreated(id="a", version=1, name="Other", email="other@example.com")
        )

    assert exc_info.value.caused_by(ErrorCode.DUPLICATE_VERSION)
    assert (await repository.load("a")).name == "Jo"


@pytest.mark.asyncio
async def test_unbound_event_type_fails_to_load(dynamodb_store, serializer):
    await Repository(User, store=dynamodb_store, serializer=serializer).save(created("a"))

    reader = Repository(User, store=dynamodb_store, serializer=JSONSerializer())

    with pytest.raises(UnboundEventTypeError) as exc_info:
        await reader.load("a")

    assert exc_info.value.event_type == "UserCreated"


@pytest.mark.asyncio
async def test_row_images_yield_new_events(dynamodb_client, serializer):
    store = DynamoDBEventStore(dynamodb_client, TABLE_NAME, events_per_item=10)
    repository = Repository(User, store=store, serializer=serializer)
    key = {"key": {"S": "a"}, "partition": {"N": "0"}}

    await repository.save(created("a"))
    old_image = dynamodb_client.get_item(TableName=TABLE_NAME, Key=key)["Item"]
    await repository.save(email_changed("a", 2), email_changed("a", 3))
    new_image = dynamodb_client.get_item(TableName=TABLE_NAME, Key=key)["Item"]

    events = [
        serializer.deserialize(Record(version=0, at=0, data=data))
        for data in raw_events(old_image, new_image)
    ]

    assert [event.version for event in events] == [2, 3]
    assert all(isinstance(event, EmailChanged) for event in events)


@pytest.mark.asyncio
async def test_create_table_waits_for_table(dynamodb_client):
    await create_table(dynamodb_client, "orders", hash_key="id", range_key="row")

    description = dynamodb_client.describe_table(TableName="orders")["Table"]
    assert description["TableStatus"] == "ACTIVE"
    assert {k["AttributeName"] for k in description["KeySchema"]} == {"id", "row"}

    store = DynamoDBEventStore(dynamodb_client, "orders", hash_key="id", range_key="row")
    await store.save("u1", Record(version=1, at=1, data=b"{}"))
    assert await store.fetch("u1") == [Record(version=1, at=1, data=b"{}")]
