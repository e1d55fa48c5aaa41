"""Stripe webhook handling: deposit payments mark reservations paid."""

from dataclasses import dataclass
from typing import Any, Optional

from structlog import get_logger

from direct_booking.clients.stripe_client import StripePaymentLinkClient
from direct_booking.models.reservation_status import ReservationStatus
from direct_booking.services.access_guard import FullAccess
from direct_booking.services.errors import InvalidTransition, ReservationNotFound
from direct_booking.services.reservation_state_machine import ReservationStateMachine

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


@dataclass
class WebhookOutcome:
    event_type: str
    handled: bool
    reservation_id: Optional[str] = None
    detail: Optional[str] = None


class PaymentWebhookHandler:
    """Verifies Stripe webhook calls and applies ``mark_paid`` once per payment.

    A call whose signature verifies acts with operator rights.
    """

    def __init__(
        self,
        payment_client: StripePaymentLinkClient,
        state_machine: ReservationStateMachine,
    ):
        self.payment_client = payment_client
        self.state_machine = state_machine

    async def handle(self, payload: bytes, signature: Optional[str]) -> WebhookOutcome:
        """Verify and dispatch a webhook call.

        Args:
            payload: Raw request body
            signature: ``Stripe-Signature`` header

        Returns:
            What was done with the event

        Raises:
            WebhookVerificationError: If the signature is missing or invalid
        """
        event = self.payment_client.construct_event(payload, signature or "")
        event_type = event.type

        if event_type != CHECKOUT_COMPLETED:
            logger.info("Unhandled Stripe event type", event_type=event_type)
            return WebhookOutcome(event_type, handled=False, detail="ignored")

        return await self._checkout_completed(event.data.object)

    async def _checkout_completed(self, session: Any) -> WebhookOutcome:
        metadata = getattr(session, "metadata", None) or {}
        reservation_id = metadata["reservationId"] if "reservationId" in metadata else None
        if not reservation_id:
            logger.error("Checkout session without reservationId", session_id=getattr(session, "id", None))
            return WebhookOutcome(CHECKOUT_COMPLETED, handled=False, detail="missing reservationId")

        reservation = await self.state_machine.store.get(reservation_id)
        if reservation is None:
            logger.error("Paid reservation not found", reservation_id=reservation_id)
            return WebhookOutcome(CHECKOUT_COMPLETED, False, reservation_id, "not found")

        if reservation.status == ReservationStatus.PAID and reservation.deposit_paid:
            logger.info("Reservation already marked paid", reservation_id=reservation_id)
            return WebhookOutcome(CHECKOUT_COMPLETED, False, reservation_id, "already paid")

        try:
            result = await self.state_machine.mark_paid(
                reservation_id,
                FullAccess(),
                payment_intent_id=getattr(session, "payment_intent", None),
            )
        except (InvalidTransition, ReservationNotFound) as e:
            logger.error(
                "Payment received for a reservation that cannot be marked paid",
                reservation_id=reservation_id,
                error=str(e),
            )
            return WebhookOutcome(CHECKOUT_COMPLETED, False, reservation_id, str(e))

        return WebhookOutcome(
            CHECKOUT_COMPLETED,
            handled=True,
            reservation_id=reservation_id,
            detail=f"{len(result.warnings)} warnings" if result.warnings else None,
        )
