import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from ....domain.exceptions import (
    AggregateNotFoundError,
    InvalidFieldError,
    UnhandledEventError,
    VersionGapError,
)
from ....domain.meta import event_type_of, inspect_event
from ...events import EventStore, History, InMemoryEventStore, JSONSerializer, Serializer

LOGGER = logging.getLogger(__name__)

A = TypeVar("A")


class AggregateFactory(Generic[A]):
    """Factory for creating fresh aggregate instances of a specific type."""

    def __init__(self, aggregate_type: type[A], create: Callable[[], A] | None = None):
        self._aggregate_type = aggregate_type
        self._create = create or aggregate_type

    def get_type(self) -> type[A]:
        """Get the aggregate type this factory produces."""
        return self._aggregate_type

    def create(self) -> A:
        """Create a new, empty aggregate instance."""
        return self._create()


class Repository(Generic[A]):
    """A mechanism for loading and saving aggregates in a consistent way.

    The repository replays an aggregate's history on every load: it fetches
    the records from the store, deserializes them and folds each event into a
    fresh aggregate through ``apply``. Saving goes the other way, inspecting
    and serializing events before handing them to the store as one batch.

    Examples:
        >>> repository = Repository(User)
        >>> repository.bind(UserCreated, EmailChanged)
        >>> await repository.save(UserCreated(id="u1", version=1, name="Jo", email="j@x"))
        >>> user = await repository.load("u1")
    """

    __slots__ = ("aggregate_factory", "store", "serializer", "strict")

    def __init__(
        self,
        aggregate: "type[A] | AggregateFactory[A]",
        store: EventStore | None = None,
        serializer: Serializer | None = None,
        *,
        strict: bool = False,
    ):
        """Initialize the repository.

        Args:
            aggregate: The aggregate class, or a factory producing instances.
            store: Where records are persisted. Defaults to an
                InMemoryEventStore.
            serializer: How events are encoded. Defaults to a JSONSerializer.
            strict: When True, a history whose versions are not exactly
                ``1..n`` fails to load with VersionGapError.
        """
        if not isinstance(aggregate, AggregateFactory):
            aggregate = AggregateFactory(aggregate)
        self.aggregate_factory = aggregate
        self.store = store if store is not None else InMemoryEventStore()
        self.serializer = serializer if serializer is not None else JSONSerializer()
        self.strict = strict

    def bind(self, *shapes: Any) -> None:
        """Register event shapes with the serializer."""
        self.serializer.bind(*shapes)
        LOGGER.debug(
            "Bound event shapes",
            extra={"event_types": [event_type_of(shape) for shape in shapes]},
        )

    def new(self) -> A:
        """Create a fresh, empty aggregate."""
        return self.aggregate_factory.create()

    async def save(self, *events: Any) -> None:
        """Persist events as one batch.

        Raises:
            InvalidFieldError: If the events belong to more than one aggregate.
            DuplicateVersionError: If any version already exists.
        """
        if not events:
            return

        aggregate_id = inspect_event(events[0]).aggregate_id
        records = []
        for event in events:
            meta = inspect_event(event)
            if meta.aggregate_id != aggregate_id:
                raise InvalidFieldError(
                    f"cannot save events for aggregates {aggregate_id!r} and "
                    f"{meta.aggregate_id!r} in one batch"
                )
            records.append(self.serializer.serialize(event))

        await self.store.save(aggregate_id, *records)
        LOGGER.debug("Saved events", extra={"aggregate_id": aggregate_id, "count": len(records)})

    async def load_events(self, aggregate_id: str, version: int = 0) -> list[Any]:
        """Load the deserialized events of an aggregate, in version order."""
        history = await self.store.fetch(aggregate_id, version)
        if not history:
            raise AggregateNotFoundError(aggregate_id)
        if self.strict:
            self._check_contiguous(aggregate_id, history)
        return [self.serializer.deserialize(record) for record in history]

    async def load(self, aggregate_id: str, version: int = 0) -> A:
        """Rebuild an aggregate by replaying its history.

        Args:
            aggregate_id: The aggregate to load.
            version: When non-zero, replay only events up to this version.

        Raises:
            AggregateNotFoundError: If the aggregate has no events.
            UnhandledEventError: If the aggregate does not apply an event.
        """
        events = await self.load_events(aggregate_id, version)
        LOGGER.debug("Loaded events", extra={"aggregate_id": aggregate_id, "count": len(events)})

        aggregate = self.new()
        for event in events:
            if not aggregate.apply(event):  # type: ignore[attr-defined]
                raise UnhandledEventError(event_type_of(event))
        return aggregate

    def _check_contiguous(self, aggregate_id: str, history: History) -> None:
        for expected, record in enumerate(history, start=1):
            if record.version != expected:
                raise VersionGapError(
                    f"aggregate {aggregate_id!r} history expected version {expected}, "
                    f"found {record.version}"
                )
