from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Get the current UTC timestamp.

    Returns:
        Current datetime with UTC timezone information

    Note:
        Used as default_factory for Model.at to ensure all events are
        timestamped in UTC regardless of system timezone.
    """
    return datetime.now(tz=timezone.utc)


def epoch_millis(moment: datetime) -> int:
    """Convert a datetime to milliseconds since the Unix epoch.

    Naive datetimes are treated as UTC. Units of time smaller than a
    millisecond are lost.

    Examples:
        >>> epoch_millis(datetime(1970, 1, 1, 0, 0, 1, 999999, tzinfo=timezone.utc))
        1999
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // _ONE_MILLI


def from_epoch_millis(millis: int) -> datetime:
    """Convert milliseconds since the Unix epoch to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=millis)


def now_millis() -> int:
    """The current time in epoch millis."""
    return epoch_millis(utc_now())


class Model(BaseModel):
    """Base record carrying the metadata every event needs.

    Event shapes either inherit from Model or hold a Model-typed field; in
    both cases the inspector discovers ``id``, ``version`` and ``at`` without
    any field tags.

    Attributes:
        id: ID of the aggregate this event belongs to.
        version: Position of the event in the aggregate's history (1-indexed).
        at: When the event occurred (UTC timezone).

    Examples:
        Inheriting the base record:

        >>> class UserCreated(Model):
        ...     name: str
        ...     email: str
        >>>
        >>> event = UserCreated(id="u1", version=1, name="Jo", email="j@x")

        Embedding the base record:

        >>> class EmailChanged(BaseModel):
        ...     model: Model
        ...     email: str
    """

    id: str = Field(description="ID of the aggregate that produced this event")
    version: int = Field(
        description="Position in aggregate's history (1-indexed, monotonically increasing)"
    )
    at: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC timezone)",
    )

    def aggregate_id(self) -> str:
        return self.id

    def event_version(self) -> int:
        return self.version

    def event_at(self) -> int:
        return epoch_millis(self.at)
