"""Exceptions raised by eventfold.

Every error carries a stable :class:`ErrorCode` suitable for programmatic
branching, a human-readable message and, where one exists, the underlying
cause (chained with ``raise ... from ...``).
"""

from enum import Enum
from typing import ClassVar


class ErrorCode(str, Enum):
    """Stable identifiers for every kind of failure surfaced by the library."""

    # Inspector
    NIL_INPUT = "NilInput"
    INVALID_FIELD = "InvalidField"
    DUPLICATE_TAG = "DuplicateTag"

    # Serializer
    DUPLICATE_BINDING = "DuplicateBinding"
    UNBOUND_EVENT_TYPE = "UnboundEventType"
    INVALID_ENCODING = "InvalidEncoding"

    # Store
    NOT_FOUND = "NotFound"
    DUPLICATE_VERSION = "DuplicateVersion"
    INVALID_KEY = "InvalidKey"
    STORAGE_ERROR = "StorageError"
    CANCELLED = "Cancelled"

    # Repository
    UNHANDLED_EVENT = "UnhandledEvent"
    VERSION_GAP = "VersionGap"

    # Dispatcher
    AGGREGATE_NOT_HANDLER = "AggregateNotHandler"
    PREPROCESSOR_ERROR = "PreprocessorError"
    EVENT_LOAD_ERROR = "EventLoadError"
    HANDLER_ERROR = "HandlerError"
    SAVE_ERROR = "SaveError"


class EventSourceError(Exception):
    """Base class for all eventfold errors.

    Attributes:
        code: Stable taxonomy code of this error.
        message: Human-readable description.

    Examples:
        Branch on the optimistic concurrency signal:

        >>> try:
        ...     await dispatcher.dispatch(command)
        ... except EventSourceError as e:
        ...     if e.caused_by(ErrorCode.DUPLICATE_VERSION):
        ...         ...  # reload and retry
    """

    code: ClassVar[ErrorCode]

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def cause(self) -> BaseException | None:
        """The exception this error was raised from, if any."""
        return self.__cause__

    def caused_by(self, code: ErrorCode) -> bool:
        """Check whether this error, or any error in its cause chain, has ``code``."""
        current: BaseException | None = self
        while current is not None:
            if isinstance(current, EventSourceError) and current.code == code:
                return True
            current = current.__cause__
        return False

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class NilInputError(EventSourceError):
    """Raised when ``None`` is passed where an event is required."""

    code = ErrorCode.NIL_INPUT


class InvalidFieldError(EventSourceError):
    """Raised when an event field cannot provide id, version or timestamp."""

    code = ErrorCode.INVALID_FIELD


class DuplicateTagError(EventSourceError):
    """Raised when two fields of one event shape carry the same tag."""

    code = ErrorCode.DUPLICATE_TAG


class DuplicateBindingError(EventSourceError):
    """Raised when an event type name is bound twice."""

    code = ErrorCode.DUPLICATE_BINDING


class UnboundEventTypeError(EventSourceError):
    """Raised when a stored envelope names a type that was never bound."""

    code = ErrorCode.UNBOUND_EVENT_TYPE

    def __init__(self, event_type: str):
        super().__init__(f"no event shape bound for type {event_type!r}")
        self.event_type = event_type


class InvalidEncodingError(EventSourceError):
    """Raised when stored bytes are not a valid envelope or payload."""

    code = ErrorCode.INVALID_ENCODING


class AggregateNotFoundError(EventSourceError):
    """Raised when no events exist for an aggregate id."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, aggregate_id: str):
        super().__init__(f"no aggregate found with id {aggregate_id!r}")
        self.aggregate_id = aggregate_id


class DuplicateVersionError(EventSourceError):
    """Raised when a save would persist an already existing version.

    This is the optimistic concurrency failure signal: another writer has
    appended to the aggregate since it was loaded. The caller should reload
    the aggregate and retry.
    """

    code = ErrorCode.DUPLICATE_VERSION

    def __init__(self, aggregate_id: str, message: str | None = None):
        super().__init__(message or f"version already exists for aggregate {aggregate_id!r}")
        self.aggregate_id = aggregate_id


class InvalidKeyError(EventSourceError):
    """Raised when a stored key does not follow the expected layout."""

    code = ErrorCode.INVALID_KEY


class StorageError(EventSourceError):
    """Raised when the underlying database fails for any other reason."""

    code = ErrorCode.STORAGE_ERROR


class OperationCancelledError(EventSourceError):
    """Raised when a store operation is cancelled while awaiting I/O.

    The durability state of a cancelled save is unknown; callers must re-read
    the history to reconcile.
    """

    code = ErrorCode.CANCELLED


class UnhandledEventError(EventSourceError):
    """Raised when an aggregate does not handle an event from its history."""

    code = ErrorCode.UNHANDLED_EVENT

    def __init__(self, event_type: str):
        super().__init__(f"aggregate was unable to handle event - {event_type}")
        self.event_type = event_type


class VersionGapError(EventSourceError):
    """Raised in strict mode when a history is not exactly versions 1..n."""

    code = ErrorCode.VERSION_GAP


class AggregateNotHandlerError(EventSourceError):
    """Raised when the target aggregate cannot handle commands."""

    code = ErrorCode.AGGREGATE_NOT_HANDLER


class PreprocessorError(EventSourceError):
    """Raised when a command preprocessor rejects a command."""

    code = ErrorCode.PREPROCESSOR_ERROR


class EventLoadError(EventSourceError):
    """Raised when the target aggregate of a command cannot be loaded."""

    code = ErrorCode.EVENT_LOAD_ERROR


class HandlerError(EventSourceError):
    """Raised when an aggregate's command handler fails."""

    code = ErrorCode.HANDLER_ERROR


class SaveError(EventSourceError):
    """Raised when the events emitted for a command cannot be saved."""

    code = ErrorCode.SAVE_ERROR
