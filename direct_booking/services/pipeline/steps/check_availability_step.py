"""Step to confirm the dates are still free in the PMS."""

from direct_booking.clients.smoobu_client import SmoobuClient, SmoobuClientError
from direct_booking.services.errors import DatesUnavailable, UpstreamUnavailable
from direct_booking.services.pipeline import PipelineStep, SubmissionContext


class CheckAvailabilityStep(PipelineStep):
    """Ask Smoobu whether the requested stay is bookable."""

    def __init__(self, smoobu_client: SmoobuClient):
        super().__init__("CheckAvailability")
        self.smoobu_client = smoobu_client

    async def execute(self, context: SubmissionContext) -> bool:
        """Check availability.

        Raises:
            DatesUnavailable: If the PMS reports the dates as taken
            UpstreamUnavailable: If the PMS cannot be reached
        """
        submission = context.submission
        try:
            available = await self.smoobu_client.check_availability(
                submission.arrival_date.isoformat(),
                submission.departure_date.isoformat(),
            )
        except SmoobuClientError as e:
            raise UpstreamUnavailable("availability feed", str(e)) from e

        context.dates_available = available
        if not available:
            raise DatesUnavailable(
                f"Dates {submission.arrival_date} to {submission.departure_date} are no longer available"
            )
        return True
