"""Route commands and events onto the aggregate methods that handle them.

A method opts in with :func:`handles_command` or :func:`applies_event`. The
message type it accepts is read from the annotation of its first parameter
after ``self``, and lookups walk the message's MRO so a handler for a base
type also receives its subclasses.
"""

import inspect
from collections.abc import Callable
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])
Handler = Callable[[Any, Any], Any]

COMMAND_MARKER = "__eventfold_command__"
EVENT_MARKER = "__eventfold_event__"


def message_type_of(func: Callable[..., Any]) -> type:
    """Return the type annotated on a handler's message parameter.

    Raises:
        ValueError: If the handler takes no message or leaves it unannotated.
    """
    name = getattr(func, "__qualname__", repr(func))
    parameters = list(inspect.signature(func, eval_str=True).parameters.values())[1:]
    if not parameters:
        raise ValueError(f"{name} takes no message parameter")

    message = parameters[0]
    if message.annotation is inspect.Parameter.empty:
        raise ValueError(f"{name}: parameter {message.name!r} needs a type annotation")
    return message.annotation


def handles_command(func: F) -> F:
    """Mark a method as the handler of the command type it annotates.

    The handler returns the events the command produced, or an awaitable of
    them.

    Example:
        >>> class User(Aggregate):
        ...     @handles_command
        ...     def create(self, cmd: CreateUser) -> list[Model]:
        ...         return [UserCreated(id=cmd.aggregate_id, version=self.next_version(), name=cmd.name)]
    """
    setattr(func, COMMAND_MARKER, message_type_of(func))
    return func


def applies_event(func: F) -> F:
    """Mark a method as the applier of the event type it annotates.

    An applier that returns ``False`` reports the event as unhandled; any
    other result counts as applied.

    Example:
        >>> class User(Aggregate):
        ...     @applies_event
        ...     def on_created(self, evt: UserCreated) -> None:
        ...         self.name = evt.name
    """
    setattr(func, EVENT_MARKER, message_type_of(func))
    return func


class MessageRouter:
    """Maps message types to handlers, falling back for unknown types."""

    __slots__ = ("routes", "fallback")

    def __init__(self, fallback: Handler):
        self.routes: dict[type, Handler] = {}
        self.fallback = fallback

    @classmethod
    def collect(cls, owner: type, marker: str, fallback: Handler) -> "MessageRouter":
        """Build a router from every method of ``owner`` carrying ``marker``.

        Base classes are scanned first, so a subclass method for the same
        message type replaces the inherited one.
        """
        router = cls(fallback)
        for klass in reversed(owner.__mro__):
            for member in vars(klass).values():
                message_type = getattr(member, marker, None)
                if isinstance(message_type, type):
                    router.register(message_type, member)
        return router

    def register(self, message_type: type, handler: Handler) -> None:
        self.routes[message_type] = handler

    def resolve(self, message_type: type) -> Handler | None:
        for klass in message_type.__mro__:
            handler = self.routes.get(klass)
            if handler is not None:
                return handler
        return None

    def route(self, instance: Any, message: Any) -> Any:
        handler = self.resolve(type(message)) or self.fallback
        return handler(instance, message)


def _no_command_handler(instance: Any, command: Any) -> Any:
    raise NotImplementedError(
        f"{type(instance).__name__} has no handler for command {type(command).__name__}"
    )


def _not_applied(instance: Any, event: Any) -> bool:
    return False


def command_router(owner: type) -> MessageRouter:
    """Router over the ``@handles_command`` methods of ``owner``.

    Unknown commands raise NotImplementedError.
    """
    return MessageRouter.collect(owner, COMMAND_MARKER, _no_command_handler)


def event_router(owner: type) -> MessageRouter:
    """Router over the ``@applies_event`` methods of ``owner``.

    Routing returns True when an applier accepted the event and False when
    there is none or it returned False.
    """
    router = MessageRouter.collect(owner, EVENT_MARKER, _not_applied)
    for message_type, applier in router.routes.items():
        router.routes[message_type] = _reporting(applier)
    return router


def _reporting(applier: Handler) -> Handler:
    def apply(instance: Any, event: Any) -> bool:
        return applier(instance, event) is not False

    return apply
