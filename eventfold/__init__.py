"""eventfold - Event-sourced aggregate persistence for Python.

This module provides the public API for replaying aggregates from their event
history and persisting new events under optimistic concurrency.
"""

from .application import (
    AggregateFactory,
    ContextPropagationPreprocessor,
    Dispatcher,
    EventStore,
    History,
    InMemoryEventStore,
    JSONSerializer,
    LoggingPreprocessor,
    Preprocessor,
    Record,
    Repository,
    Serializer,
    preprocessor,
)
from .domain import (
    Aggregate,
    Command,
    ConstructorCommand,
    ErrorCode,
    EventSourceError,
    EventTag,
    Model,
    inspect_event,
)
from .routing import applies_event, handles_command

__all__ = [
    # Persistence
    "Repository",
    "AggregateFactory",
    "EventStore",
    "InMemoryEventStore",
    "Record",
    "History",
    "Serializer",
    "JSONSerializer",
    # Dispatch
    "Dispatcher",
    "Preprocessor",
    "preprocessor",
    "ContextPropagationPreprocessor",
    "LoggingPreprocessor",
    # Domain primitives
    "Aggregate",
    "Command",
    "ConstructorCommand",
    "Model",
    "EventTag",
    "inspect_event",
    # Errors
    "ErrorCode",
    "EventSourceError",
    # Decorators
    "applies_event",
    "handles_command",
]
