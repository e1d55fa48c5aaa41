"""Runs the guest submission steps in order."""

from structlog import get_logger

from .base_step import PipelineStep
from .context import SubmissionContext

logger = get_logger(__name__)


class Pipeline:
    """Ordered steps over one ``SubmissionContext``.

    Required steps gate the rest: the first one that fails ends the run.
    Optional steps (notifications) may fail without affecting the outcome.
    """

    def __init__(self, name: str, steps: list[PipelineStep]):
        self.name = name
        self.steps = steps
        self.logger = logger.bind(pipeline=name)

    async def execute(self, context: SubmissionContext) -> SubmissionContext:
        """Run every step until a required one fails.

        Args:
            context: Fresh submission context

        Returns:
            The same context with ``success`` and ``stats["pipeline"]`` set
        """
        completed: list[str] = []
        failed: list[str] = []
        stopped_at = None

        for step in self.steps:
            if await step.run(context):
                completed.append(step.get_name())
                continue

            failed.append(step.get_name())
            if step.is_required():
                stopped_at = step.get_name()
                break
            self.logger.info("Optional step skipped", step=step.get_name())

        context.success = not context.has_errors()
        context.stats["pipeline"] = {
            "name": self.name,
            "completed": completed,
            "failed": failed,
            "stopped_at": stopped_at,
        }

        self.logger.info(
            "Submission pipeline finished",
            reservation_id=context.reservation_id,
            success=context.success,
            completed=len(completed),
            failed=len(failed),
            stopped_at=stopped_at,
        )
        return context

    def get_step_names(self) -> list[str]:
        return [step.get_name() for step in self.steps]
