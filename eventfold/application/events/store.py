"""Event store interfaces and implementations for durable event persistence."""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ...domain.exceptions import AggregateNotFoundError, DuplicateVersionError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Record:
    """The persisted form of a single event.

    Attributes:
        version: Position of the event in its aggregate's history.
        at: When the event occurred, in epoch millis.
        data: The serialized envelope.
    """

    version: int
    at: int
    data: bytes


History = list[Record]


class EventStore(ABC):
    """Abstract interface for durable event persistence.

    EventStore is the foundation of event sourcing: each aggregate's records
    form an append-only log that can be replayed to reconstruct state.

    Key responsibilities:
    - **Ordering**: Records are retrieved in ascending version order
    - **Concurrency Control**: A version can be written at most once per aggregate
    - **Immutability**: Records cannot be modified after storage
    """

    @abstractmethod
    async def save(self, aggregate_id: str, *records: Record) -> None:
        """Persist records for an aggregate.

        Args:
            aggregate_id: The aggregate the records belong to.
            *records: Records to persist. Saving no records is a no-op.

        Raises:
            DuplicateVersionError: If any record's version already exists for
                the aggregate. Atomic stores then write none of the batch;
                see the adapter for its partial-batch behaviour.
            StorageError: If the underlying database fails.
            OperationCancelledError: If the save is cancelled while in flight.
        """
        ...

    @abstractmethod
    async def fetch(self, aggregate_id: str, version: int = 0) -> History:
        """Load the history of an aggregate.

        Args:
            aggregate_id: The aggregate whose records to load.
            version: When non-zero, only records with ``version <= version``
                are returned.

        Returns:
            The records in ascending version order.

        Raises:
            AggregateNotFoundError: If the aggregate has no records.
            StorageError: If the underlying database fails.
            OperationCancelledError: If the fetch is cancelled while in flight.
        """
        ...


def check_batch(aggregate_id: str, records: tuple[Record, ...]) -> None:
    """Reject a batch that repeats a version within itself."""
    seen: set[int] = set()
    for record in records:
        if record.version in seen:
            raise DuplicateVersionError(
                aggregate_id, f"batch repeats version {record.version} for aggregate {aggregate_id!r}"
            )
        seen.add(record.version)


class InMemoryEventStore(EventStore):
    """Dictionary-based in-memory event store.

    Records are kept per aggregate id in a list ordered by version. All
    mutations happen under one lock, so concurrent writers from any thread
    see a consistent duplicate check.

    This implementation is suitable for unit tests, development and examples.
    It offers no durability: data is lost on restart.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_aggregate_id: dict[str, list[Record]] = {}

    async def save(self, aggregate_id: str, *records: Record) -> None:
        if not records:
            return

        check_batch(aggregate_id, records)

        with self._lock:
            current = self._by_aggregate_id.get(aggregate_id, [])
            existing = {record.version for record in current}
            for record in records:
                if record.version in existing:
                    LOGGER.warning(
                        "Duplicate version rejected",
                        extra={"aggregate_id": aggregate_id, "version": record.version},
                    )
                    raise DuplicateVersionError(aggregate_id)

            merged = sorted([*current, *records], key=lambda record: record.version)
            self._by_aggregate_id[aggregate_id] = merged

        LOGGER.debug(
            "Saved records",
            extra={"aggregate_id": aggregate_id, "count": len(records)},
        )

    async def fetch(self, aggregate_id: str, version: int = 0) -> History:
        with self._lock:
            history = list(self._by_aggregate_id.get(aggregate_id, ()))

        if version:
            history = [record for record in history if record.version <= version]
        if not history:
            raise AggregateNotFoundError(aggregate_id)
        return history
