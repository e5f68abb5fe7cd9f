"""Helpers for consuming the table's change stream.

Stream records carry the old and new image of a row. The events appended by a
write are exactly the slots present in the new image but absent from the old.
"""

from collections.abc import Mapping
from typing import Any

from ...domain.exceptions import InvalidKeyError
from .keys import is_slot, version_from_key


def _payload(value: Any) -> bytes:
    # Low-level attribute values look like {"B": b"..."}
    if isinstance(value, Mapping):
        value = value.get("B")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise InvalidKeyError(f"slot value is not binary: {type(value).__name__}")


def raw_events(
    old_image: Mapping[str, Any] | None,
    new_image: Mapping[str, Any] | None,
) -> list[bytes]:
    """Return the envelopes of events added between two images of a row.

    Args:
        old_image: The row before the write, or None for a new row.
        new_image: The row after the write.

    Returns:
        The payload bytes of every new slot, in ascending version order.

    Raises:
        InvalidKeyError: If a slot name or value is malformed.

    Examples:
        >>> raw_events(None, {"_1:abc": {"B": b"{...}"}, "revision": {"N": "1"}})
        [b'{...}']
    """
    if not new_image:
        return []

    old_slots = {name for name in (old_image or {}) if is_slot(name)}
    added = [
        (version_from_key(name), _payload(value))
        for name, value in new_image.items()
        if is_slot(name) and name not in old_slots
    ]
    added.sort(key=lambda item: item[0])
    return [data for _, data in added]


def table_name(event_source_arn: str) -> str:
    """Extract the table name from a stream's event source ARN.

    Examples:
        >>> table_name("arn:aws:dynamodb:us-east-1:123:table/events/stream/2017-08-20T00:00:00.000")
        'events'
    """
    segments = event_source_arn.split("/")
    if len(segments) < 2 or not segments[1]:
        raise InvalidKeyError(f"invalid event source arn {event_source_arn!r}")
    return segments[1]
