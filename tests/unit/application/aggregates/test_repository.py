"""Tests for the aggregate repository."""

import pytest

from eventfold.application import AggregateFactory, InMemoryEventStore, JSONSerializer, Repository
from eventfold.domain import (
    AggregateNotFoundError,
    DuplicateBindingError,
    DuplicateVersionError,
    InvalidFieldError,
    Model,
    UnboundEventTypeError,
    UnhandledEventError,
    VersionGapError,
    utc_now,
)
from tests.fixtures.test_app import (
    EmailChanged,
    Ledger,
    User,
    UserCreated,
    UserDeactivated,
    UserRenamed,
)


def created(aggregate_id: str = "u1") -> UserCreated:
    return UserCreated(id=aggregate_id, version=1, name="Jo", email="j@x")


def changed(version: int, email: str, aggregate_id: str = "u1") -> EmailChanged:
    return EmailChanged(id=aggregate_id, version=version, email=email)


# AggregateFactory Tests


def test_aggregate_factory_create():
    factory = AggregateFactory(User)

    user = factory.create()

    assert isinstance(user, User)
    assert user.version == 0
    assert factory.get_type() is User


def test_repository_accepts_factory():
    repository = Repository(AggregateFactory(Ledger, lambda: Ledger()))

    assert isinstance(repository.new(), Ledger)


# Save / Load Tests


@pytest.mark.asyncio
async def test_save_then_load(user_repository):
    await user_repository.save(created(), changed(2, "k@x"))

    user = await user_repository.load("u1")

    assert user.name == "Jo"
    assert user.email == "k@x"
    assert user.version == 2


@pytest.mark.asyncio
async def test_load_all_event_shapes(user_repository):
    await user_repository.save(
        created(),
        UserRenamed(user_id="u1", seq=2, when=utc_now(), name="Joanna"),
        UserDeactivated(model=Model(id="u1", version=3)),
    )

    user = await user_repository.load("u1")

    assert user.name == "Joanna"
    assert user.active is False
    assert user.version == 3


@pytest.mark.asyncio
async def test_load_up_to_version(user_repository):
    await user_repository.save(created(), changed(2, "a@x"), changed(3, "b@x"))

    user = await user_repository.load("u1", version=2)

    assert user.email == "a@x"
    assert user.version == 2


@pytest.mark.asyncio
async def test_replay_is_deterministic(user_repository):
    await user_repository.save(created(), changed(2, "k@x"))

    assert await user_repository.load("u1") == await user_repository.load("u1")


@pytest.mark.asyncio
async def test_save_nothing_is_noop(user_repository):
    await user_repository.save()

    with pytest.raises(AggregateNotFoundError):
        await user_repository.load("u1")


@pytest.mark.asyncio
async def test_save_duplicate_version(user_repository):
    await user_repository.save(created())

    with pytest.raises(DuplicateVersionError):
        await user_repository.save(changed(1, "k@x"))


@pytest.mark.asyncio
async def test_save_mixed_aggregates(user_repository, event_store):
    with pytest.raises(InvalidFieldError):
        await user_repository.save(created("u1"), changed(2, "k@x", aggregate_id="u2"))

    with pytest.raises(AggregateNotFoundError):
        await event_store.fetch("u1")


@pytest.mark.asyncio
async def test_load_unknown_aggregate(user_repository):
    with pytest.raises(AggregateNotFoundError):
        await user_repository.load("missing")


@pytest.mark.asyncio
async def test_load_unhandled_event(event_store, serializer):
    ledger_repository = Repository(Ledger, store=event_store, serializer=serializer)
    await ledger_repository.save(created())

    with pytest.raises(UnhandledEventError, match="UserCreated"):
        await ledger_repository.load("u1")


@pytest.mark.asyncio
async def test_load_unbound_event_type(event_store, serializer):
    await Repository(User, store=event_store, serializer=serializer).save(created(), changed(2, "k@x"))

    partial = JSONSerializer()
    partial.bind(UserCreated)
    repository = Repository(User, store=event_store, serializer=partial)

    with pytest.raises(UnboundEventTypeError):
        await repository.load("u1")


@pytest.mark.asyncio
async def test_load_events(user_repository):
    await user_repository.save(created(), changed(2, "k@x"))

    events = await user_repository.load_events("u1")

    assert [type(event) for event in events] == [UserCreated, EmailChanged]


def test_bind_surfaces_serializer_errors():
    repository = Repository(User)
    repository.bind(UserCreated)

    with pytest.raises(DuplicateBindingError):
        repository.bind(UserCreated)


# Gap Detection Tests


@pytest.mark.asyncio
async def test_lenient_load_accepts_gaps(user_repository):
    await user_repository.save(created(), changed(3, "k@x"))

    user = await user_repository.load("u1")

    assert user.version == 3


@pytest.mark.asyncio
async def test_strict_load_rejects_gaps(serializer):
    repository = Repository(User, store=InMemoryEventStore(), serializer=serializer, strict=True)
    await repository.save(created(), changed(3, "k@x"))

    with pytest.raises(VersionGapError):
        await repository.load("u1")


@pytest.mark.asyncio
async def test_strict_load_accepts_contiguous_history(serializer):
    repository = Repository(User, store=InMemoryEventStore(), serializer=serializer, strict=True)
    await repository.save(created(), changed(2, "k@x"))

    user = await repository.load("u1")

    assert user.email == "k@x"
