"""Base class for command preprocessors.

Preprocessors run in order before a command reaches its aggregate. They can
validate, enrich the execution context or reject the command by raising.
"""

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from ....domain import Command

PreprocessorFunc = Callable[[Command], "Awaitable[None] | None"]


class Preprocessor(ABC):
    """Hook invoked by the dispatcher before a command is handled.

    Examples:
        Reject commands for a frozen aggregate:

        >>> class RejectFrozen(Preprocessor):
        ...     async def before(self, command: Command) -> None:
        ...         if command.aggregate_id in FROZEN:
        ...             raise PermissionError("aggregate is frozen")
    """

    @abstractmethod
    async def before(self, command: Command) -> None:
        """Inspect the command before dispatch. Raise to abort dispatch."""
        ...

    async def after(self, command: Command) -> None:
        """Called once dispatch finishes, successfully or not."""
        return None


class _FunctionPreprocessor(Preprocessor):
    __slots__ = ("func",)

    def __init__(self, func: PreprocessorFunc):
        self.func = func

    async def before(self, command: Command) -> None:
        result: Any = self.func(command)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        return f"preprocessor({getattr(self.func, '__name__', self.func)!r})"


def preprocessor(func: PreprocessorFunc) -> Preprocessor:
    """Adapt a plain function (sync or async) into a Preprocessor.

    Examples:
        >>> @preprocessor
        ... async def require_email(command: Command) -> None:
        ...     if not getattr(command, "email", "x"):
        ...         raise ValueError("email required")
    """
    return _FunctionPreprocessor(func)
