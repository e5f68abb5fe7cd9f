from ....context import ExecutionContext, clear_context, set_context
from ....domain import Command
from .base import Preprocessor


class ContextPropagationPreprocessor(Preprocessor):
    """Expose the command's ids through :func:`eventfold.context.get_context`.

    A command without a correlation id starts a new operation. Causation
    falls back to the correlation id. The context is cleared once dispatch
    finishes, whether or not it succeeded.
    """

    async def before(self, command: Command) -> None:
        context = ExecutionContext.create(command.correlation_id)
        if command.causation_id is not None:
            context = ExecutionContext(
                correlation_id=context.correlation_id,
                causation_id=command.causation_id,
            )
        set_context(context.for_command(command.command_id))

    async def after(self, command: Command) -> None:
        clear_context()
