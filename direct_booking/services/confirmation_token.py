"""Signed, expiring tokens for the guest's post-payment confirmation view."""

import hashlib
import hmac
import time
from typing import Any, Callable, Optional

from structlog import get_logger

from direct_booking.clients.reservation_store import ReservationStore
from direct_booking.config import settings
from direct_booking.models.reservation import Reservation

logger = get_logger(__name__)

HASH_LENGTH = 32

PUBLIC_FIELDS = (
    "id",
    "first_name",
    "arrival_date",
    "departure_date",
    "nights",
    "guests",
    "total",
    "deposit_amount",
    "deposit_paid",
    "status",
)

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_DIGITS[remainder])
    return "".join(reversed(digits))


def public_summary(reservation: Reservation) -> dict[str, Any]:
    """Fields safe to show to whoever holds a confirmation token."""
    return reservation.model_dump(mode="json", by_alias=True, include=set(PUBLIC_FIELDS))


class ConfirmationTokenService:
    """Issues ``"<timestamp base36>.<hmac prefix>"`` tokens bound to one reservation.

    The timestamp is in milliseconds; the hash is the first 32 hex characters
    of HMAC-SHA256 over ``"<reservation_id>:<timestamp>"``.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        max_age_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.secret = secret or settings.admin.confirmation_token_secret.get_secret_value()
        self.max_age_seconds = max_age_seconds or settings.admin.confirmation_token_max_age_seconds
        self.clock = clock

    def _sign(self, reservation_id: str, timestamp: str) -> str:
        data = f"{reservation_id}:{timestamp}".encode()
        return hmac.new(self.secret.encode(), data, hashlib.sha256).hexdigest()[:HASH_LENGTH]

    def generate(self, reservation_id: str) -> str:
        timestamp = to_base36(int(self.clock() * 1000))
        return f"{timestamp}.{self._sign(reservation_id, timestamp)}"

    def verify(self, token: str, reservation_id: str) -> bool:
        """Check the signature and age of ``token`` for ``reservation_id``."""
        parts = token.split(".")
        if len(parts) != 2:
            return False

        timestamp, digest = parts
        try:
            issued_ms = int(timestamp, 36)
        except ValueError:
            return False

        age_ms = self.clock() * 1000 - issued_ms
        if age_ms > self.max_age_seconds * 1000:
            logger.info("Confirmation token expired", reservation_id=reservation_id)
            return False

        return hmac.compare_digest(digest.encode(), self._sign(reservation_id, timestamp).encode())

    async def lookup(
        self,
        store: ReservationStore,
        reservation_id: str,
        token: str,
    ) -> Optional[dict[str, Any]]:
        """Public summary of a reservation, or None for a bad token or unknown id."""
        if not self.verify(token, reservation_id):
            return None
        reservation = await store.get(reservation_id)
        if reservation is None:
            return None
        return public_summary(reservation)
