"""Row and slot key layout of the DynamoDB event store.

Each row holds up to ``events_per_item`` events of one aggregate. An event
lives in a slot attribute named ``"_" + version + ":" + base36(at)``, so the
slot name alone carries the version and timestamp of the record.
"""

import re
import string

from ...domain.exceptions import InvalidKeyError

SLOT_PREFIX = "_"
AT_BASE = 36

_DIGITS = string.digits + string.ascii_lowercase
_VERSION_PATTERN = re.compile(r"[0-9]+")
_AT_PATTERN = re.compile(r"-?[0-9a-z]+")


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits = []
    while value:
        value, remainder = divmod(value, AT_BASE)
        digits.append(_DIGITS[remainder])
    return sign + "".join(reversed(digits))


def select_partition(version: int, events_per_item: int) -> int:
    """The row (range key value) holding ``version``."""
    return version // events_per_item


def slot_name(version: int, at: int) -> str:
    """Build the slot attribute name of a record.

    Examples:
        >>> slot_name(12, 1500000000000)
        '_12:j5399reo'
    """
    return f"{SLOT_PREFIX}{version}:{_to_base36(at)}"


def is_slot(name: str) -> bool:
    """Whether an attribute name is an event slot rather than bookkeeping."""
    return name.startswith(SLOT_PREFIX)


def version_and_at(name: str) -> tuple[int, int]:
    """Parse a slot name into ``(version, at_millis)``.

    Raises:
        InvalidKeyError: If the name does not follow the slot layout.
    """
    if not is_slot(name):
        raise InvalidKeyError(f"invalid event key {name!r}")

    segments = name[len(SLOT_PREFIX) :].split(":")
    if len(segments) != 2:
        raise InvalidKeyError(f"invalid event key {name!r}")

    version, at = segments
    if not _VERSION_PATTERN.fullmatch(version):
        raise InvalidKeyError(f"invalid version in event key {name!r}")
    if not _AT_PATTERN.fullmatch(at):
        raise InvalidKeyError(f"invalid timestamp in event key {name!r}")
    return int(version), int(at, AT_BASE)


def version_from_key(name: str) -> int:
    """Parse only the version out of a slot name."""
    return version_and_at(name)[0]
