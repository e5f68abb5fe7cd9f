"""Application layer: persistence, replay and command dispatch."""

from .aggregates import AggregateFactory, Repository
from .commands import (
    ContextPropagationPreprocessor,
    Dispatcher,
    LoggingPreprocessor,
    Preprocessor,
    preprocessor,
)
from .events import EventStore, History, InMemoryEventStore, JSONSerializer, Record, Serializer

__all__ = [
    "AggregateFactory",
    "Repository",
    "Dispatcher",
    "Preprocessor",
    "preprocessor",
    "ContextPropagationPreprocessor",
    "LoggingPreprocessor",
    "EventStore",
    "History",
    "InMemoryEventStore",
    "JSONSerializer",
    "Record",
    "Serializer",
]
