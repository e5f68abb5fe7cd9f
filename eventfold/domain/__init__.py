"""Domain primitives for event sourcing.

This module contains the core building blocks that users extend to create
their domain models:

- Model: Base record carrying an event's aggregate id, version and timestamp
- Aggregate: Base class for aggregates folded from events
- Command / ConstructorCommand: Base classes for command messages
- EventTag / inspect_event: Declarative event metadata discovery
- EventSourceError and its subclasses: The error taxonomy
"""

from .aggregate import Aggregate, CommandHandler, EventApplier
from .command import Command, ConstructorCommand
from .event import Model, epoch_millis, from_epoch_millis, now_millis, utc_now
from .exceptions import (
    AggregateNotFoundError,
    AggregateNotHandlerError,
    DuplicateBindingError,
    DuplicateTagError,
    DuplicateVersionError,
    ErrorCode,
    EventLoadError,
    EventSourceError,
    HandlerError,
    InvalidEncodingError,
    InvalidFieldError,
    InvalidKeyError,
    NilInputError,
    OperationCancelledError,
    PreprocessorError,
    SaveError,
    StorageError,
    UnboundEventTypeError,
    UnhandledEventError,
    VersionGapError,
)
from .meta import EventMeta, EventTag, check_shape, event_type_of, inspect_event

__all__ = [
    # Base types
    "Aggregate",
    "Command",
    "ConstructorCommand",
    "Model",
    "CommandHandler",
    "EventApplier",
    # Inspection
    "EventMeta",
    "EventTag",
    "check_shape",
    "event_type_of",
    "inspect_event",
    # Time
    "epoch_millis",
    "from_epoch_millis",
    "now_millis",
    "utc_now",
    # Errors
    "ErrorCode",
    "EventSourceError",
    "NilInputError",
    "InvalidFieldError",
    "DuplicateTagError",
    "DuplicateBindingError",
    "UnboundEventTypeError",
    "InvalidEncodingError",
    "AggregateNotFoundError",
    "DuplicateVersionError",
    "InvalidKeyError",
    "StorageError",
    "OperationCancelledError",
    "UnhandledEventError",
    "VersionGapError",
    "AggregateNotHandlerError",
    "PreprocessorError",
    "EventLoadError",
    "HandlerError",
    "SaveError",
]
