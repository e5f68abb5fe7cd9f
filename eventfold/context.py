"""Correlation ids for the command currently being dispatched.

The ids live in a ContextVar, so each asyncio task sees its own context and
concurrent dispatches never observe each other's ids.
"""

from contextvars import ContextVar
from dataclasses import dataclass, replace

from ulid import ULID


@dataclass(frozen=True)
class ExecutionContext:
    """Ids describing where the current unit of work came from.

    Attributes:
        correlation_id: Shared by every command of one logical operation.
        causation_id: Whatever directly triggered the current command.
        command_id: The command being dispatched, if any.
    """

    correlation_id: ULID | None = None
    causation_id: ULID | None = None
    command_id: ULID | None = None

    @classmethod
    def create(cls, correlation_id: ULID | None = None) -> "ExecutionContext":
        """Start a new operation.

        An entry point is its own cause, so causation equals correlation.
        """
        correlation_id = correlation_id or ULID()
        return cls(correlation_id=correlation_id, causation_id=correlation_id)

    def for_command(self, command_id: ULID) -> "ExecutionContext":
        """The same operation, narrowed to one command.

        Examples:
            >>> set_context(get_or_create_context().for_command(command.command_id))
        """
        return replace(self, command_id=command_id)


_EMPTY = ExecutionContext()
_current: ContextVar[ExecutionContext | None] = ContextVar("eventfold_context", default=None)


def get_context() -> ExecutionContext:
    """The current context, or one with every id unset."""
    return _current.get() or _EMPTY


def set_context(context: ExecutionContext) -> None:
    _current.set(context)


def clear_context() -> None:
    _current.set(None)


def get_or_create_context() -> ExecutionContext:
    context = _current.get()
    if context is None:
        context = ExecutionContext.create()
        _current.set(context)
    return context
