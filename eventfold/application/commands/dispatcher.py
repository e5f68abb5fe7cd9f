import inspect
import logging
from typing import Any

from ...domain.exceptions import (
    AggregateNotHandlerError,
    EventLoadError,
    HandlerError,
    InvalidFieldError,
    PreprocessorError,
    SaveError,
)
from ..aggregates import Repository
from .preprocessors import Preprocessor

LOGGER = logging.getLogger(__name__)


def _is_constructor(command: Any) -> bool:
    is_constructor = getattr(command, "is_constructor", None)
    return callable(is_constructor) and is_constructor() is True


class Dispatcher:
    """Runs a command through load, handle and save.

    For each command the dispatcher:

    1. runs every preprocessor's ``before`` in order;
    2. obtains the aggregate, fresh from ``repository.new()`` for constructor
       commands and replayed with ``repository.load`` otherwise;
    3. hands the command to the aggregate's ``handle``;
    4. saves the emitted events with ``repository.save``.

    Each failure is raised as a distinct error chained from its cause. A
    SaveError caused by DuplicateVersionError means another writer got there
    first; the caller may dispatch the command again, which reloads the
    aggregate.

    Examples:
        >>> dispatcher = Dispatcher(repository, ContextPropagationPreprocessor())
        >>> events = await dispatcher.dispatch(CreateUser(aggregate_id="u1", name="Jo"))
    """

    __slots__ = ("repository", "preprocessors")

    def __init__(self, repository: Repository[Any], *preprocessors: Preprocessor):
        self.repository = repository
        self.preprocessors = preprocessors

    async def dispatch(self, command: Any) -> list[Any]:
        """Dispatch a command to its aggregate.

        Returns:
            The events that were saved, possibly empty.

        Raises:
            PreprocessorError: If a preprocessor rejects the command.
            EventLoadError: If the target aggregate cannot be loaded.
            AggregateNotHandlerError: If the aggregate has no ``handle``.
            HandlerError: If the aggregate's handler fails.
            SaveError: If the emitted events cannot be saved.
        """
        started: list[Preprocessor] = []
        try:
            for preprocessor in self.preprocessors:
                started.append(preprocessor)
                try:
                    await preprocessor.before(command)
                except Exception as e:
                    self._log_failure(command, "preprocessor")
                    raise PreprocessorError(
                        f"{preprocessor!r} failed on command {type(command).__name__}"
                    ) from e

            return await self._handle(command)
        finally:
            for preprocessor in reversed(started):
                try:
                    await preprocessor.after(command)
                except Exception:
                    LOGGER.exception(
                        "Preprocessor cleanup failed",
                        extra={"command_type": type(command).__name__, "preprocessor": repr(preprocessor)},
                    )

    async def _handle(self, command: Any) -> list[Any]:
        aggregate_id = getattr(command, "aggregate_id", None)

        if _is_constructor(command):
            aggregate = self.repository.new()
        else:
            try:
                if aggregate_id is None:
                    raise InvalidFieldError(f"command {type(command).__name__} has no aggregate id")
                aggregate = await self.repository.load(str(aggregate_id))
            except Exception as e:
                self._log_failure(command, "load")
                raise EventLoadError(
                    f"unable to load {self.repository.aggregate_factory.get_type().__name__} "
                    f"[{aggregate_id}]"
                ) from e

        handle = getattr(aggregate, "handle", None)
        if not callable(handle):
            raise AggregateNotHandlerError(
                f"{type(aggregate).__name__} does not handle commands"
            )

        try:
            result = handle(command)
            if inspect.isawaitable(result):
                result = await result
            events = list(result or ())
        except Exception as e:
            self._log_failure(command, "handler")
            raise HandlerError(
                f"failed to apply command {type(command).__name__} to aggregate "
                f"{type(aggregate).__name__}"
            ) from e

        try:
            await self.repository.save(*events)
        except Exception as e:
            self._log_failure(command, "save")
            raise SaveError(
                f"failed to save events for {type(aggregate).__name__} [{aggregate_id}]"
            ) from e

        return events

    def _log_failure(self, command: Any, stage: str) -> None:
        extra = {
            "command_type": type(command).__name__,
            "aggregate_id": str(getattr(command, "aggregate_id", None)),
            "stage": stage,
        }
        correlation_id = getattr(command, "correlation_id", None)
        if correlation_id is not None:
            extra["correlation_id"] = str(correlation_id)
        LOGGER.warning("Command dispatch failed", extra=extra, exc_info=True)
