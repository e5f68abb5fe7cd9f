"""Central test fixtures - imports from unified test_app."""

import pytest
from ulid import ULID

from eventfold.application import Dispatcher, InMemoryEventStore, JSONSerializer, Repository
from eventfold.context import clear_context

# Import all test domain objects from unified test app
from tests.fixtures.test_app import ALL_EVENTS, User


@pytest.fixture(autouse=True)
def _clean_context():
    yield
    clear_context()


@pytest.fixture
def aggregate_id() -> str:
    """Generate a unique aggregate ID."""
    return str(ULID())


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def serializer() -> JSONSerializer:
    serializer = JSONSerializer()
    serializer.bind(*ALL_EVENTS)
    return serializer


@pytest.fixture
def user_repository(event_store, serializer) -> Repository[User]:
    """Create a repository for User aggregates over the in-memory store."""
    return Repository(User, store=event_store, serializer=serializer)


@pytest.fixture
def dispatcher(user_repository) -> Dispatcher:
    return Dispatcher(user_repository)
