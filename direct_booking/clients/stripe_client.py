"""Stripe client for deposit payment links and webhook verification."""

import asyncio
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import stripe
from pydantic import BaseModel
from structlog import get_logger

from direct_booking.config import settings
from direct_booking.models.reservation import Reservation

logger = get_logger(__name__)


class PaymentLinkError(Exception):
    """Raised when a payment link cannot be created."""

    pass


class WebhookVerificationError(Exception):
    """Raised when a webhook payload fails signature verification."""

    pass


class PaymentLink(BaseModel):
    """Created payment link."""

    id: str
    url: str


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount in currency units to cents."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class StripePaymentLinkClient:
    """Creates one-off Stripe payment links for reservation deposits."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.stripe.secret_key.get_secret_value()
        self.webhook_secret = (
            webhook_secret
            if webhook_secret is not None
            else settings.stripe.webhook_secret.get_secret_value()
        )
        self.currency = settings.stripe.currency
        self.product_name = settings.stripe.product_name
        self.site_url = settings.site_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)

    def _create_link_sync(self, amount: Decimal, reservation: Reservation) -> PaymentLink:
        product = stripe.Product.create(
            api_key=self.secret_key,
            name=self.product_name,
            description=f"{reservation.arrival_date.isoformat()} au {reservation.departure_date.isoformat()}",
        )
        price = stripe.Price.create(
            api_key=self.secret_key,
            product=product.id,
            unit_amount=to_minor_units(amount),
            currency=self.currency,
        )
        link = stripe.PaymentLink.create(
            api_key=self.secret_key,
            line_items=[{"price": price.id, "quantity": 1}],
            metadata={"reservationId": reservation.id, "type": "deposit"},
            after_completion={
                "type": "redirect",
                "redirect": {
                    "url": f"{self.site_url}/reservation/confirmed?id={reservation.id}",
                },
            },
        )
        return PaymentLink(id=link.id, url=link.url)

    async def create_link(self, amount: Decimal, reservation: Reservation) -> PaymentLink:
        """Create a payment link for a reservation deposit.

        Args:
            amount: Deposit amount in currency units
            reservation: Reservation the deposit secures

        Returns:
            Created payment link

        Raises:
            PaymentLinkError: If Stripe is not configured or rejects the request
        """
        if not self.is_configured:
            raise PaymentLinkError("STRIPE_SECRET_KEY is not set")

        logger.info(
            "Creating Stripe payment link",
            reservation_id=reservation.id,
            amount=str(amount),
        )
        try:
            link = await asyncio.to_thread(self._create_link_sync, amount, reservation)
        except stripe.StripeError as e:
            logger.error(
                "Stripe payment link creation failed",
                reservation_id=reservation.id,
                error=str(e),
            )
            raise PaymentLinkError(f"Stripe error: {str(e)}") from e

        logger.info(
            "Created Stripe payment link",
            reservation_id=reservation.id,
            payment_link_id=link.id,
        )
        return link

    def construct_event(self, payload: bytes, signature: str) -> Any:
        """Verify and parse a webhook payload.

        Args:
            payload: Raw request body
            signature: ``Stripe-Signature`` header value

        Returns:
            Parsed Stripe event

        Raises:
            WebhookVerificationError: If the secret is missing or the signature is invalid
        """
        if not self.webhook_secret:
            raise WebhookVerificationError("STRIPE_WEBHOOK_SECRET is not set")
        try:
            return stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            raise WebhookVerificationError(f"Webhook signature verification failed: {str(e)}") from e
