"""Steps to email the guest and the operator about a new request."""

from direct_booking.services.notifications import NotificationService
from direct_booking.services.pipeline import PipelineStep, SubmissionContext


class NotifyGuestStep(PipelineStep):
    """Acknowledge the request to the guest."""

    required = False

    def __init__(self, notifications: NotificationService):
        super().__init__("NotifyGuest")
        self.notifications = notifications

    async def execute(self, context: SubmissionContext) -> bool:
        failure = await self.notifications.reservation_received(context.reservation)
        if failure:
            context.add_warning(failure)
            return False
        return True


class NotifyOperatorStep(PipelineStep):
    """Send the operator the request with its approve/reject link."""

    required = False

    def __init__(self, notifications: NotificationService):
        super().__init__("NotifyOperator")
        self.notifications = notifications

    async def execute(self, context: SubmissionContext) -> bool:
        failure = await self.notifications.operator_new_request(context.reservation)
        if failure:
            context.add_warning(failure)
            return False
        return True
