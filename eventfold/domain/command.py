from pydantic import BaseModel, Field
from ulid import ULID


class Command(BaseModel):
    """A request addressed to one aggregate.

    The dispatcher replays the aggregate named by ``aggregate_id`` and hands
    it the command; the events the handler returns are saved as one batch.

    Attributes:
        aggregate_id: Target aggregate.
        command_id: Identity of this request, generated when omitted.
        correlation_id: Operation this command belongs to, if known.
        causation_id: Message that triggered this command, if known.

    Examples:
        >>> class ChangeEmail(Command):
        ...     email: str
        >>>
        >>> await dispatcher.dispatch(ChangeEmail(aggregate_id="u1", email="k@x"))
    """

    aggregate_id: str
    command_id: ULID = Field(default_factory=ULID)
    correlation_id: ULID | None = None
    causation_id: ULID | None = None

    def is_constructor(self) -> bool:
        """Whether the target aggregate starts empty instead of being replayed."""
        return False


class ConstructorCommand(Command):
    """A command that brings a new aggregate into existence.

    The aggregate is not loaded first. If it already exists, the first event
    collides with the stored version 1 and the save fails.
    """

    def is_constructor(self) -> bool:
        return True
