"""Step to persist the new pending reservation."""

from direct_booking.clients.reservation_store import ReservationStore, ReservationStoreError
from direct_booking.models.reservation import Reservation
from direct_booking.services.errors import UpstreamUnavailable
from direct_booking.services.pipeline import PipelineStep, SubmissionContext


class CreateReservationStep(PipelineStep):
    """Store the reservation as ``pending`` with a fresh link token."""

    def __init__(self, store: ReservationStore):
        super().__init__("CreateReservation")
        self.store = store

    async def execute(self, context: SubmissionContext) -> bool:
        """Create the reservation.

        Raises:
            UpstreamUnavailable: If the store cannot be written
        """
        reservation = Reservation.from_submission(context.submission, context.pricing)
        try:
            context.reservation = await self.store.create(reservation)
        except ReservationStoreError as e:
            raise UpstreamUnavailable("reservation store", str(e)) from e

        self.logger.info(
            "Created pending reservation",
            reservation_id=reservation.id,
            nights=reservation.nights,
            amount_due=str(reservation.amount_due),
        )
        return True
