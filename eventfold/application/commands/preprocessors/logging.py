import logging

from ....context import get_context
from ....domain import Command
from .base import Preprocessor

LOGGER = logging.getLogger(__name__)

_CONTEXT_IDS = ("correlation_id", "causation_id", "command_id")


class LoggingPreprocessor(Preprocessor):
    """Log one line per dispatched command.

    Only the command's type, target and context ids are logged; field values
    can hold personal data and are left out. Place it after
    ContextPropagationPreprocessor to get the ids of the command itself.

    Args:
        level: Level name such as ``"INFO"`` or ``"debug"``.
    """

    def __init__(self, level: str = "INFO"):
        self.level = logging.getLevelName(level.upper())
        if not isinstance(self.level, int):
            raise ValueError(f"unknown log level {level!r}")

    async def before(self, command: Command) -> None:
        context = get_context()
        extra = {
            "command_type": type(command).__name__,
            "aggregate_id": command.aggregate_id,
        }
        for name in _CONTEXT_IDS:
            value = getattr(context, name)
            if value is not None:
                extra[name] = str(value)

        LOGGER.log(self.level, "Received Command", extra=extra)
