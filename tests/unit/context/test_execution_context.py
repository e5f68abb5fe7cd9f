"""Tests for ExecutionContext and context variable management."""

from ulid import ULID

from eventfold.context import (
    ExecutionContext,
    clear_context,
    get_context,
    get_or_create_context,
    set_context,
)


def test_create_generates_correlation_id():
    context = ExecutionContext.create()

    assert context.correlation_id is not None
    assert context.causation_id == context.correlation_id
    assert context.command_id is None


def test_create_with_explicit_correlation_id():
    correlation_id = ULID()
    context = ExecutionContext.create(correlation_id)

    assert context.correlation_id == correlation_id
    assert context.causation_id == correlation_id


def test_for_command_keeps_correlation():
    context = ExecutionContext.create()
    command_id = ULID()

    child = context.for_command(command_id)

    assert child.correlation_id == context.correlation_id
    assert child.causation_id == context.causation_id
    assert child.command_id == command_id
    assert context.command_id is None


def test_get_context_without_set_is_empty():
    context = get_context()

    assert context == ExecutionContext()
    assert context.correlation_id is None


def test_set_then_get_context():
    context = ExecutionContext.create()
    set_context(context)

    assert get_context() is context


def test_clear_context():
    set_context(ExecutionContext.create())
    clear_context()

    assert get_context().correlation_id is None


def test_get_or_create_context_sets_new_context():
    context = get_or_create_context()

    assert context.correlation_id is not None
    assert get_context() is context
    assert get_or_create_context() is context
