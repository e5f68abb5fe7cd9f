"""Event persistence for eventfold.

- Record / History: The persisted form of events
- EventStore: Durable event persistence contract
- InMemoryEventStore: Process-local store for tests and development
- Serializer / JSONSerializer: Event type registry and envelope encoding
"""

from .serializer import Envelope, JSONSerializer, Serializer
from .store import EventStore, History, InMemoryEventStore, Record, check_batch

__all__ = [
    "EventStore",
    "History",
    "InMemoryEventStore",
    "Record",
    "check_batch",
    "Envelope",
    "JSONSerializer",
    "Serializer",
]
