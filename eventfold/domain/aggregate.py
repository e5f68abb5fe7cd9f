from collections.abc import Awaitable, Sequence
from datetime import datetime
from typing import Any, ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel

from ..routing import MessageRouter, command_router, event_router
from .event import from_epoch_millis
from .meta import inspect_event


@runtime_checkable
class EventApplier(Protocol):
    """Anything that can fold events into its state."""

    def apply(self, event: Any) -> bool: ...


@runtime_checkable
class CommandHandler(Protocol):
    """Anything that can turn a command into a batch of new events."""

    def handle(self, command: Any) -> Sequence[Any] | Awaitable[Sequence[Any]]: ...


class Aggregate(BaseModel):
    """Base class for event-sourced aggregates.

    An aggregate's state is derived exclusively by folding its history through
    ``apply``. Command handlers never mutate state directly: they return the
    events describing what happened, and those events are folded in the next
    time the aggregate is loaded.

    Command and event handling is routed based on method decorators. Use
    @handles_command to mark command handler methods and @applies_event to mark
    event applier methods; routing uses the type annotation of the first
    parameter.

    Examples:
        >>> class User(Aggregate):
        ...     name: str = ""
        ...     email: str = ""
        ...
        ...     @handles_command
        ...     def create(self, cmd: CreateUser) -> list[Model]:
        ...         return [UserCreated(id=cmd.aggregate_id, version=self.next_version(),
        ...                             name=cmd.name, email=cmd.email)]
        ...
        ...     @applies_event
        ...     def on_created(self, evt: UserCreated) -> None:
        ...         self.name = evt.name
        ...         self.email = evt.email

    Attributes:
        id: ID of the aggregate, taken from the last applied event.
        version: Version of the last applied event; 0 for a new aggregate.
        updated_at: Timestamp of the last applied event.
    """

    id: str = ""
    version: int = 0
    updated_at: datetime | None = None

    _command_router: ClassVar[MessageRouter]
    _event_router: ClassVar[MessageRouter]

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Collect the subclass's decorated handlers and appliers."""
        super().__init_subclass__(**kwargs)  # type: ignore[arg-type]
        cls._command_router = command_router(cls)
        cls._event_router = event_router(cls)

    def apply(self, event: Any) -> bool:
        """Fold one event into the aggregate state.

        Args:
            event: The event to apply.

        Returns:
            True if an applier accepted the event. False when there is no
            applier for its type or the applier returned False.
        """
        handled = self._event_router.route(self, event)
        if handled:
            meta = inspect_event(event)
            self.id = meta.aggregate_id
            self.version = meta.version
            self.updated_at = from_epoch_millis(meta.at)
        return handled

    def handle(self, command: Any) -> Any:
        """Pass a command to its @handles_command method.

        Returns whatever the method returns: a list of events, or an
        awaitable of one for async handlers. Unknown command types raise
        NotImplementedError.
        """
        return self._command_router.route(self, command)

    def next_version(self) -> int:
        """The version the next emitted event should carry."""
        return self.version + 1
