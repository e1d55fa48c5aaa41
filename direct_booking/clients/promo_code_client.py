"""HTTP client for the remote promo-code validation service."""

from decimal import Decimal
from typing import Optional

import httpx
from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from direct_booking.config import settings
from direct_booking.models.promo_code import (
    PromoAccepted,
    PromoErrorKind,
    PromoRejected,
    PromoValidation,
)

logger = get_logger(__name__)


class PromoCodeClientError(Exception):
    """Raised when the promo-code service cannot be reached or answers garbage."""

    pass


class PromoCodeClient:
    """Validates promo codes against the remote service."""

    def __init__(
        self,
        service_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.service_url = service_url or settings.promo.service_url
        self.timeout = settings.promo.request_timeout
        self._transport = transport

    async def validate(self, code: str, nights: int, total_price: Decimal) -> PromoValidation:
        """POST the code to the service and parse the verdict.

        Raises:
            PromoCodeClientError: On transport failure, 5xx or malformed body
        """
        payload = {"code": code, "nights": nights, "totalPrice": float(total_price)}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.service_url, json=payload)
        except httpx.RequestError as e:
            raise PromoCodeClientError(f"Promo service request failed: {str(e)}") from e

        if response.status_code >= 500:
            raise PromoCodeClientError(f"Promo service error {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise PromoCodeClientError("Promo service returned invalid JSON") from e

        if body.get("valid"):
            try:
                return PromoAccepted(**body)
            except PydanticValidationError as e:
                raise PromoCodeClientError(f"Malformed promo descriptor: {str(e)}") from e

        raw_kind = body.get("errorKind") or body.get("error")
        try:
            kind = PromoErrorKind(raw_kind)
        except ValueError:
            kind = PromoErrorKind.INVALID_CODE
        logger.debug("Promo code rejected by service", code=code, error_kind=kind.value)
        return PromoRejected(error=kind, message=body.get("message") or body.get("error") or "")
