"""DynamoDB fixtures backed by moto's in-process AWS mock."""

import boto3
import pytest
from moto import mock_aws

from eventfold.integrations.dynamodb import DynamoDBEventStore, make_create_table_input

TABLE_NAME = "events"


@pytest.fixture
def dynamodb_client(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")

    with mock_aws():
        client = boto3.client("dynamodb", region_name="us-east-1")
        client.create_table(**make_create_table_input(TABLE_NAME, 5, 5, streams=True))
        yield client


@pytest.fixture
def dynamodb_store(dynamodb_client) -> DynamoDBEventStore:
    return DynamoDBEventStore(dynamodb_client, TABLE_NAME)
