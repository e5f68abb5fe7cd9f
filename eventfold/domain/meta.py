"""Event metadata inspection.

The inspector extracts ``(aggregate_id, version, at, event_type)`` from any
event value. Three discovery paths are supported, checked per attribute:

1. A field tagged with :class:`EventTag` in its ``Annotated`` metadata.
2. The event itself inherits the :class:`~eventfold.domain.event.Model` base
   record.
3. The event holds a field annotated with a ``Model`` subclass (an embedded
   base record).

Examples:
    Field tags with a type name override:

    >>> class UserRenamed(BaseModel):
    ...     user_id: Annotated[str, EventTag("id", event_type="user.renamed")]
    ...     seq: Annotated[int, EventTag("version")]
    ...     when: Annotated[datetime, EventTag("at")]
    ...     name: str
    >>>
    >>> inspect_event(UserRenamed(user_id="u1", seq=3, when=utc_now(), name="Jo")).event_type
    'user.renamed'
"""

from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Annotated, Any, ClassVar, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from .event import Model, epoch_millis
from .exceptions import DuplicateTagError, InvalidFieldError, NilInputError

ID = "id"
VERSION = "version"
AT = "at"
TAG_NAMES = (ID, VERSION, AT)

_TYPE_PREFIX = "type:"


@dataclass(frozen=True)
class EventTag:
    """Declarative marker placed in ``Annotated`` field metadata.

    Attributes:
        name: One of ``"id"``, ``"version"`` or ``"at"``.
        event_type: Optional literal overriding the default type name
            (the class name) of the event shape.
    """

    name: str
    event_type: str | None = None

    def __post_init__(self) -> None:
        if self.name not in TAG_NAMES:
            raise InvalidFieldError(f"unknown event tag {self.name!r}; expected one of {TAG_NAMES}")
        if self.event_type is not None and not self.event_type:
            raise InvalidFieldError("event type override must not be empty")
        if self.event_type is not None and self.name != "id":
            raise InvalidFieldError(f"only the id tag takes a type option, not {self.name!r}")

    @classmethod
    def parse(cls, text: str) -> "EventTag":
        """Parse the tag-string form, e.g. ``"id,type:user.created"``."""
        name, *options = (part.strip() for part in text.split(","))
        event_type = None
        for option in options:
            if not option.startswith(_TYPE_PREFIX):
                raise InvalidFieldError(f"invalid event tag option {option!r} in {text!r}")
            if event_type is not None:
                raise DuplicateTagError(f"type option repeated in {text!r}")
            event_type = option[len(_TYPE_PREFIX) :]
        return cls(name, event_type)


@dataclass(frozen=True)
class EventMeta:
    """Metadata view of an event, produced on demand and never stored."""

    aggregate_id: str
    version: int
    at: int
    event_type: str
    event: Any


@dataclass(frozen=True)
class _Schema:
    tagged: dict[str, str]
    embedded: str | None
    is_model: bool
    event_type: str

    def resolves(self, name: str) -> bool:
        return name in self.tagged or self.is_model or self.embedded is not None


def _check_annotation(shape: type, field_name: str, tag: str, annotation: Any) -> None:
    # Only plain classes can be checked up front; unions etc. are checked per value.
    if get_origin(annotation) is not None or not isinstance(annotation, type):
        return
    if tag == VERSION:
        valid = issubclass(annotation, int) and not issubclass(annotation, bool)
    elif tag == AT:
        valid = issubclass(annotation, (int, datetime)) and not issubclass(annotation, bool)
    else:
        valid = True
    if not valid:
        raise InvalidFieldError(
            f"{shape.__name__}.{field_name} tagged {tag!r} has unsupported type "
            f"{annotation.__name__}"
        )


def _is_model_class(annotation: Any) -> bool:
    return (
        get_origin(annotation) is None
        and isinstance(annotation, type)
        and issubclass(annotation, Model)
    )


def _field_hints(shape: type) -> list[tuple[str, Any, list[Any]]]:
    # Pydantic moves Annotated metadata onto FieldInfo.metadata
    if issubclass(shape, BaseModel):
        return [
            (name, field.annotation, list(field.metadata))
            for name, field in shape.model_fields.items()
        ]

    try:
        hints = get_type_hints(shape, include_extras=True)
    except (NameError, TypeError) as e:
        raise InvalidFieldError(f"unable to resolve fields of {shape.__name__}") from e

    fields = []
    for name, hint in hints.items():
        if get_origin(hint) is ClassVar:
            continue
        if get_origin(hint) is Annotated:
            annotation, *extras = get_args(hint)
            fields.append((name, annotation, extras))
        else:
            fields.append((name, hint, []))
    return fields


@lru_cache(maxsize=None)
def _schema_for(shape: type) -> _Schema:
    tagged: dict[str, str] = {}
    type_override: str | None = None
    embedded: str | None = None

    for field_name, annotation, extras in _field_hints(shape):
        for extra in extras:
            if not isinstance(extra, EventTag):
                continue
            if extra.name in tagged:
                raise DuplicateTagError(
                    f"{shape.__name__} tags both {tagged[extra.name]!r} and "
                    f"{field_name!r} as {extra.name!r}"
                )
            _check_annotation(shape, field_name, extra.name, annotation)
            tagged[extra.name] = field_name
            if extra.event_type is not None:
                if type_override is not None:
                    raise DuplicateTagError(f"{shape.__name__} declares more than one type override")
                type_override = extra.event_type

        if embedded is None and _is_model_class(annotation):
            embedded = field_name

    event_type = type_override or getattr(shape, "__event_type__", None) or shape.__name__
    return _Schema(
        tagged=tagged,
        embedded=embedded,
        is_model=issubclass(shape, Model),
        event_type=event_type,
    )


def _shape_of(event_or_shape: Any) -> type:
    if event_or_shape is None:
        raise NilInputError("attempt to inspect nil event")
    return event_or_shape if isinstance(event_or_shape, type) else type(event_or_shape)


def event_type_of(event_or_shape: Any) -> str:
    """Get the stable type name of an event or event class."""
    return _schema_for(_shape_of(event_or_shape)).event_type


def check_shape(shape: type) -> str:
    """Verify an event class exposes id, version and at; return its type name.

    Raises:
        NilInputError: If shape is None.
        DuplicateTagError: If a tag is declared on more than one field.
        InvalidFieldError: If an attribute cannot be discovered or has an
            unsupported type.
    """
    shape = _shape_of(shape)
    schema = _schema_for(shape)
    for name in TAG_NAMES:
        if not schema.resolves(name):
            raise InvalidFieldError(
                f"{shape.__name__} has no field tagged {name!r} and no embedded base record"
            )
    return schema.event_type


def _read(event: Any, schema: _Schema, name: str) -> Any:
    if name in schema.tagged:
        return getattr(event, schema.tagged[name])
    if schema.is_model:
        return getattr(event, name)
    if schema.embedded is not None:
        base = getattr(event, schema.embedded)
        if base is None:
            raise InvalidFieldError(
                f"{type(event).__name__}.{schema.embedded} base record is not set"
            )
        return getattr(base, name)
    raise InvalidFieldError(
        f"{type(event).__name__} has no field tagged {name!r} and no embedded base record"
    )


def _coerce_id(shape: type, value: Any) -> str:
    if value is None:
        raise InvalidFieldError(f"{shape.__name__} aggregate id is not set")
    try:
        aggregate_id = str(value)
    except Exception as e:
        raise InvalidFieldError(f"{shape.__name__} aggregate id is not string-coercible") from e
    if not aggregate_id:
        raise InvalidFieldError(f"{shape.__name__} aggregate id is empty")
    return aggregate_id


def _coerce_version(shape: type, value: Any) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidFieldError(
            f"{shape.__name__} version must be an integer, got {type(value).__name__}"
        )
    if value < 1:
        raise InvalidFieldError(f"{shape.__name__} version must be positive, got {value}")
    return value


def _coerce_at(shape: type, value: Any) -> int:
    if isinstance(value, datetime):
        return epoch_millis(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise InvalidFieldError(
        f"{shape.__name__} timestamp must be epoch millis or a datetime, "
        f"got {type(value).__name__}"
    )


def inspect_event(event: Any) -> EventMeta:
    """Extract the metadata of an event.

    Args:
        event: Any event value whose shape exposes id, version and at.

    Returns:
        The EventMeta of the event.

    Raises:
        NilInputError: If event is None.
        DuplicateTagError: If the event shape tags more than one field alike.
        InvalidFieldError: If a field is missing or holds an unsupported value.
    """
    shape = _shape_of(event)
    if isinstance(event, type):
        raise InvalidFieldError(f"expected an event instance, got the class {shape.__name__}")
    schema = _schema_for(shape)

    return EventMeta(
        aggregate_id=_coerce_id(shape, _read(event, schema, ID)),
        version=_coerce_version(shape, _read(event, schema, VERSION)),
        at=_coerce_at(shape, _read(event, schema, AT)),
        event_type=schema.event_type,
        event=event,
    )
