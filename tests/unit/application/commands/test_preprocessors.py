"""Tests for the bundled command preprocessors."""

import logging

import pytest
from ulid import ULID

from eventfold.application import (
    ContextPropagationPreprocessor,
    Dispatcher,
    LoggingPreprocessor,
    preprocessor,
)
from eventfold.context import get_context
from eventfold.domain import SaveError
from tests.fixtures.test_app import CreateUser


@pytest.mark.asyncio
async def test_context_propagation_uses_command_ids(user_repository):
    seen = []

    @preprocessor
    def capture(command):
        seen.append(get_context())

    command = CreateUser(aggregate_id="u1", name="Jo", email="j@x", correlation_id=ULID())
    await Dispatcher(user_repository, ContextPropagationPreprocessor(), capture).dispatch(command)

    assert seen[0].correlation_id == command.correlation_id
    assert seen[0].causation_id == command.correlation_id
    assert seen[0].command_id == command.command_id


@pytest.mark.asyncio
async def test_context_propagation_generates_correlation(user_repository):
    seen = []

    @preprocessor
    def capture(command):
        seen.append(get_context())

    await Dispatcher(user_repository, ContextPropagationPreprocessor(), capture).dispatch(
        CreateUser(aggregate_id="u1", name="Jo", email="j@x")
    )

    assert seen[0].correlation_id is not None


@pytest.mark.asyncio
async def test_context_cleared_after_dispatch(user_repository):
    await Dispatcher(user_repository, ContextPropagationPreprocessor()).dispatch(
        CreateUser(aggregate_id="u1", name="Jo", email="j@x", correlation_id=ULID())
    )

    assert get_context().correlation_id is None


@pytest.mark.asyncio
async def test_context_cleared_after_failure(user_repository):
    dispatcher = Dispatcher(user_repository, ContextPropagationPreprocessor())
    command = CreateUser(aggregate_id="u1", name="Jo", email="j@x", correlation_id=ULID())
    await dispatcher.dispatch(command)

    with pytest.raises(SaveError):
        await dispatcher.dispatch(command)

    assert get_context().correlation_id is None


@pytest.mark.asyncio
async def test_logging_preprocessor(user_repository, caplog):
    command = CreateUser(aggregate_id="u1", name="Jo", email="j@x", correlation_id=ULID())
    dispatcher = Dispatcher(user_repository, ContextPropagationPreprocessor(), LoggingPreprocessor("info"))

    with caplog.at_level(logging.INFO, logger="eventfold"):
        await dispatcher.dispatch(command)

    records = [record for record in caplog.records if record.getMessage() == "Received Command"]
    assert len(records) == 1
    assert records[0].command_type == "CreateUser"
    assert records[0].aggregate_id == "u1"
    assert records[0].correlation_id == str(command.correlation_id)
    assert not hasattr(records[0], "email")


@pytest.mark.asyncio
async def test_context_propagation_keeps_explicit_causation(user_repository):
    seen = []

    @preprocessor
    def capture(command):
        seen.append(get_context())

    command = CreateUser(
        aggregate_id="u1", name="Jo", email="j@x", correlation_id=ULID(), causation_id=ULID()
    )
    await Dispatcher(user_repository, ContextPropagationPreprocessor(), capture).dispatch(command)

    assert seen[0].correlation_id == command.correlation_id
    assert seen[0].causation_id == command.causation_id


def test_logging_preprocessor_rejects_unknown_level():
    with pytest.raises(ValueError, match="unknown log level"):
        LoggingPreprocessor("LOUD")
