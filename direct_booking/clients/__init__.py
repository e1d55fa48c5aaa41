"""External service clients package."""

from direct_booking.clients.email_client import EmailClientError, ResendEmailClient
from direct_booking.clients.promo_code_client import PromoCodeClient, PromoCodeClientError
from direct_booking.clients.reservation_store import (
    RedisReservationStore,
    ReservationStore,
    ReservationStoreError,
)
from direct_booking.clients.smoobu_client import (
    SmoobuAuthenticationError,
    SmoobuClient,
    SmoobuClientError,
    SmoobuNotFoundError,
    SmoobuServerError,
)
from direct_booking.clients.stripe_client import (
    PaymentLink,
    PaymentLinkError,
    StripePaymentLinkClient,
    WebhookVerificationError,
)

__all__ = [
    "EmailClientError",
    "ResendEmailClient",
    "PromoCodeClient",
    "PromoCodeClientError",
    "RedisReservationStore",
    "ReservationStore",
    "ReservationStoreError",
    "SmoobuAuthenticationError",
    "SmoobuClient",
    "SmoobuClientError",
    "SmoobuNotFoundError",
    "SmoobuServerError",
    "PaymentLink",
    "PaymentLinkError",
    "StripePaymentLinkClient",
    "WebhookVerificationError",
]
