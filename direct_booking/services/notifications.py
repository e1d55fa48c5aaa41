"""Guest and operator notification emails keyed by lifecycle event."""

from typing import Optional

from structlog import get_logger

from direct_booking.clients.email_client import EmailClientError, ResendEmailClient
from direct_booking.config import settings
from direct_booking.models.reservation import Reservation
from direct_booking.services.errors import BestEffortFailure

logger = get_logger(__name__)

DEFAULT_REJECTION_REASON = {
    "fr": "Les dates demandées ne sont plus disponibles.",
    "en": "The requested dates are no longer available.",
}

SUBJECTS = {
    "received": {
        "fr": "Demande de réservation reçue - Au Marais",
        "en": "Reservation request received - Au Marais",
    },
    "approved": {
        "fr": "Votre réservation est acceptée - Au Marais",
        "en": "Your reservation is approved - Au Marais",
    },
    "rejected": {
        "fr": "Votre demande de réservation - Au Marais",
        "en": "Your reservation request - Au Marais",
    },
    "paid": {
        "fr": "Paiement confirmé - Au Marais",
        "en": "Payment confirmed - Au Marais",
    },
}


def _lang(reservation: Reservation) -> str:
    return "fr" if reservation.locale == "fr" else "en"


def _stay_line(reservation: Reservation) -> str:
    return (
        f"{reservation.arrival_date.isoformat()} -> {reservation.departure_date.isoformat()} "
        f"({reservation.nights} nuits/nights, {reservation.guests} pers.)"
    )


class NotificationService:
    """Sends lifecycle emails; failures are logged and returned, never raised."""

    def __init__(self, email_client: Optional[ResendEmailClient] = None):
        self.email_client = email_client or ResendEmailClient()
        self.admin_emails = settings.email.admin_emails

    async def _send(
        self,
        operation: str,
        reservation: Reservation,
        to: list[str],
        subject: str,
        text: str,
    ) -> Optional[BestEffortFailure]:
        try:
            await self.email_client.send(to=to, subject=subject, text=text)
        except EmailClientError as e:
            logger.warning(
                "Failed to send email",
                reservation_id=reservation.id,
                operation=operation,
                error=str(e),
            )
            return BestEffortFailure(operation=operation, error=str(e))
        logger.info("Email sent", reservation_id=reservation.id, operation=operation)
        return None

    async def reservation_received(self, reservation: Reservation) -> Optional[BestEffortFailure]:
        lang = _lang(reservation)
        text = "\n".join([
            f"Bonjour {reservation.first_name}," if lang == "fr" else f"Hello {reservation.first_name},",
            _stay_line(reservation),
            f"Total: {reservation.amount_due} EUR",
        ])
        return await self._send(
            "email_reservation_received", reservation, [reservation.email],
            SUBJECTS["received"][lang], text,
        )

    async def operator_new_request(self, reservation: Reservation) -> Optional[BestEffortFailure]:
        """Operator notice with the single-reservation action link."""
        action_url = f"{settings.reservation_url(reservation.id)}?token={reservation.token}"
        text = "\n".join([
            f"Nouvelle demande - {reservation.full_name} ({reservation.nights} nuits)",
            _stay_line(reservation),
            f"Email: {reservation.email} / Tel: {reservation.phone}",
            f"Total: {reservation.amount_due} EUR, caution suggérée: {reservation.deposit_amount} EUR",
            f"Message: {reservation.message or '-'}",
            f"Approuver / refuser: {action_url}",
        ])
        return await self._send(
            "email_operator_new_request", reservation, list(self.admin_emails),
            f"Nouvelle demande - {reservation.full_name} ({reservation.nights} nuits)", text,
        )

    async def reservation_approved(
        self,
        reservation: Reservation,
        payment_link_url: str,
    ) -> Optional[BestEffortFailure]:
        lang = _lang(reservation)
        text = "\n".join([
            _stay_line(reservation),
            f"Caution / Deposit: {reservation.deposit_amount} EUR",
            payment_link_url,
        ])
        return await self._send(
            "email_reservation_approved", reservation, [reservation.email],
            SUBJECTS["approved"][lang], text,
        )

    async def reservation_rejected(
        self,
        reservation: Reservation,
        reason: Optional[str] = None,
    ) -> Optional[BestEffortFailure]:
        lang = _lang(reservation)
        text = "\n".join([
            _stay_line(reservation),
            reason or DEFAULT_REJECTION_REASON[lang],
        ])
        return await self._send(
            "email_reservation_rejected", reservation, [reservation.email],
            SUBJECTS["rejected"][lang], text,
        )

    async def payment_confirmed(self, reservation: Reservation) -> Optional[BestEffortFailure]:
        lang = _lang(reservation)
        text = "\n".join([
            _stay_line(reservation),
            f"Caution reçue / Deposit received: {reservation.deposit_amount} EUR",
        ])
        return await self._send(
            "email_payment_confirmed", reservation, [reservation.email],
            SUBJECTS["paid"][lang], text,
        )
