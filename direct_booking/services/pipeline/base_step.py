"""Base class for submission pipeline steps."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from structlog import get_logger

if TYPE_CHECKING:
    from .context import SubmissionContext

logger = get_logger(__name__)


class PipelineStep(ABC):
    """One stage of a guest submission.

    ``execute`` reads the context and writes its result back. Raising marks
    the step failed; the exception is kept on the context so the service can
    re-raise it unchanged. Returning False fails the step without an error.
    """

    required = True

    def __init__(self, name: str | None = None):
        self.name = name or self.__class__.__name__
        self.logger = logger.bind(step=self.name)

    @abstractmethod
    async def execute(self, context: "SubmissionContext") -> bool:
        """Do the step's work; True on success."""

    async def run(self, context: "SubmissionContext") -> bool:
        """Execute, recording any exception on the context.

        Returns:
            Whether the step succeeded
        """
        try:
            success = await self.execute(context)
        except Exception as e:
            self.logger.warning(
                "Step raised",
                reservation_id=context.reservation_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            context.add_error(self.name, e)
            return False

        self.logger.debug("Step finished", success=success, reservation_id=context.reservation_id)
        return success

    def is_required(self) -> bool:
        return self.required

    def get_name(self) -> str:
        return self.name
