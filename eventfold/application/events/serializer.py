"""Event serializers.

A serializer keeps the registry of bound event shapes and converts events to
and from :class:`Record` values. The default :class:`JSONSerializer` writes a
JSON envelope ``{"t": <type name>, "d": <payload>}``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, PydanticUserError, TypeAdapter, ValidationError

from ...domain.exceptions import (
    DuplicateBindingError,
    InvalidEncodingError,
    InvalidFieldError,
    NilInputError,
    UnboundEventTypeError,
)
from ...domain.meta import check_shape, inspect_event
from .store import Record

LOGGER = logging.getLogger(__name__)


class Envelope(BaseModel):
    """Wire format of a serialized event."""

    t: str
    d: Any


class Serializer(ABC):
    """Converts events to records and back."""

    @abstractmethod
    def bind(self, *shapes: Any) -> None:
        """Register event shapes so their records can be deserialized.

        Args:
            *shapes: Event classes, or instances whose class should be bound.

        Raises:
            NilInputError: If a shape is None.
            DuplicateBindingError: If a type name is already bound.
            InvalidFieldError: If a shape cannot provide id, version or at.
        """
        ...

    @abstractmethod
    def serialize(self, event: Any) -> Record:
        ...

    @abstractmethod
    def deserialize(self, record: Record) -> Any:
        ...


@lru_cache(maxsize=None)
def _adapter_for(shape: type) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(shape)
    except PydanticUserError as e:
        raise InvalidFieldError(f"unable to build a schema for {shape.__name__}") from e


class JSONSerializer(Serializer):
    """Serializer writing events as UTF-8 JSON envelopes.

    The payload is the pydantic JSON-mode dump of the event, so any shape
    pydantic can validate is supported: models, dataclasses and TypedDicts.
    Adding an optional field with a default to a bound shape keeps previously
    stored records readable.

    Examples:
        >>> serializer = JSONSerializer()
        >>> serializer.bind(UserCreated, EmailChanged)
        >>> record = serializer.serialize(UserCreated(id="u1", version=1, name="Jo"))
        >>> serializer.deserialize(record)
        UserCreated(id='u1', version=1, ...)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._shapes: dict[str, type] = {}

    def bind(self, *shapes: Any) -> None:
        for shape in shapes:
            if shape is None:
                raise NilInputError("attempt to bind nil event")
            if not isinstance(shape, type):
                shape = type(shape)

            event_type = check_shape(shape)
            _adapter_for(shape)

            with self._lock:
                if event_type in self._shapes:
                    raise DuplicateBindingError(
                        f"event type {event_type!r} is already bound to "
                        f"{self._shapes[event_type].__name__}"
                    )
                # Copy on write keeps lookups lock-free
                self._shapes = {**self._shapes, event_type: shape}

            LOGGER.debug("Bound event type", extra={"event_type": event_type})

    def is_bound(self, event_type: str) -> bool:
        return event_type in self._shapes

    def bound_types(self) -> list[str]:
        return sorted(self._shapes)

    def serialize(self, event: Any) -> Record:
        meta = inspect_event(event)
        adapter = _adapter_for(type(event))
        envelope = Envelope(t=meta.event_type, d=adapter.dump_python(event, mode="json"))
        return Record(
            version=meta.version,
            at=meta.at,
            data=envelope.model_dump_json().encode("utf-8"),
        )

    def deserialize(self, record: Record) -> Any:
        try:
            envelope = Envelope.model_validate_json(record.data)
        except ValidationError as e:
            raise InvalidEncodingError(
                f"record version {record.version} is not a valid event envelope"
            ) from e

        shape = self._shapes.get(envelope.t)
        if shape is None:
            raise UnboundEventTypeError(envelope.t)

        try:
            return _adapter_for(shape).validate_python(envelope.d)
        except ValidationError as e:
            raise InvalidEncodingError(
                f"record version {record.version} holds an invalid {envelope.t!r} payload"
            ) from e
