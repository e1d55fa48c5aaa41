"""Promo-code validation and the client-side applied-promo state."""

import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError as PydanticValidationError
from structlog import get_logger

from direct_booking.clients.promo_code_client import PromoCodeClientError
from direct_booking.models.promo_code import (
    PromoAccepted,
    PromoCode,
    PromoErrorKind,
    PromoRejected,
    PromoType,
    PromoValidation,
)
from direct_booking.services.errors import UpstreamUnavailable
from direct_booking.services.pricing_engine import round_half_up

logger = get_logger(__name__)


class PromoCodeService(Protocol):
    """Anything that can judge a promo code."""

    async def validate(self, code: str, nights: int, total_price: Decimal) -> PromoValidation:
        ...


class PromoCodeCatalog:
    """File-backed promo-code service.

    The catalog file has the shape
    ``{"codes": {CODE: {...}}, "settings": {"caseInsensitive": true}}``.
    """

    def __init__(
        self,
        codes: dict[str, PromoCode],
        case_insensitive: bool = True,
        today: Optional[date] = None,
    ):
        self.case_insensitive = case_insensitive
        self.codes = {self._normalize(code): promo for code, promo in codes.items()}
        self._today = today

    def _normalize(self, code: str) -> str:
        code = code.strip()
        return code.upper() if self.case_insensitive else code

    @classmethod
    def from_file(cls, path: Path) -> "PromoCodeCatalog":
        """Load a catalog; a missing file yields an empty catalog."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.warning("Promo code catalog not found, no codes available", path=str(path))
            return cls({})

        codes = {}
        for code, entry in (raw.get("codes") or {}).items():
            try:
                codes[code] = PromoCode(code=code, **entry)
            except PydanticValidationError as e:
                logger.warning("Skipping invalid promo code entry", code=code, error=str(e))
        case_insensitive = (raw.get("settings") or {}).get("caseInsensitive", True)
        return cls(codes, case_insensitive=case_insensitive)

    async def validate(self, code: str, nights: int, total_price: Decimal) -> PromoValidation:
        normalized = self._normalize(code)
        promo = self.codes.get(normalized)
        today = self._today or date.today()

        if promo is None:
            return PromoRejected(error=PromoErrorKind.INVALID_CODE, message="Code invalide")
        if not promo.active:
            return PromoRejected(error=PromoErrorKind.INACTIVE, message="Ce code n'est plus actif")
        if promo.valid_from and today < promo.valid_from:
            return PromoRejected(error=PromoErrorKind.NOT_YET_VALID, message="Ce code n'est pas encore valide")
        if promo.expires_at and today > promo.expires_at:
            return PromoRejected(error=PromoErrorKind.EXPIRED, message="Ce code a expiré")
        if promo.max_uses is not None and promo.used_count >= promo.max_uses:
            return PromoRejected(
                error=PromoErrorKind.USAGE_LIMIT_REACHED,
                message="Ce code a atteint sa limite d'utilisation",
            )
        if promo.min_nights and nights > 0 and nights < promo.min_nights:
            return PromoRejected(
                error=PromoErrorKind.MIN_NIGHTS_NOT_MET,
                message=f"Ce code nécessite un minimum de {promo.min_nights} nuits",
            )

        discount_amount = Decimal("0")
        if total_price > 0:
            if promo.type == PromoType.PERCENT:
                discount_amount = round_half_up(total_price * promo.discount / Decimal("100"))
            else:
                discount_amount = promo.discount

        return PromoAccepted(
            code=normalized,
            discount=promo.discount,
            type=promo.type,
            description=promo.description,
            discount_amount=discount_amount,
        )


class PromoCodeValidator:
    """Consumes a promo-code service and surfaces typed results."""

    def __init__(self, service: PromoCodeService):
        self.service = service

    async def validate(self, code: str, nights: int, total_price: Decimal) -> PromoValidation:
        """Validate ``code`` for a stay.

        Raises:
            UpstreamUnavailable: If the service cannot be reached
        """
        if not code or not code.strip():
            return PromoRejected(error=PromoErrorKind.INVALID_CODE, message="Code manquant")
        try:
            result = await self.service.validate(code.strip(), nights, total_price)
        except PromoCodeClientError as e:
            logger.warning("Promo code service unavailable", error=str(e))
            raise UpstreamUnavailable("promo-code service", str(e)) from e

        logger.info(
            "Promo code validated",
            code=code.strip().upper(),
            valid=result.valid,
            error_kind=None if result.valid else result.error.value,
        )
        return result


class AppliedPromo:
    """The promo currently applied to a guest's quote."""

    def __init__(self):
        self.current: Optional[PromoAccepted] = None
        self.last_error: Optional[PromoErrorKind] = None

    def apply(self, result: PromoValidation) -> Optional[PromoErrorKind]:
        """Set the promo on success, clear it on refusal.

        Returns:
            The refusal kind, or None when the promo was applied
        """
        if isinstance(result, PromoAccepted):
            self.current = result
            self.last_error = None
            return None
        self.current = None
        self.last_error = result.error
        return result.error

    def clear(self) -> None:
        self.current = None
        self.last_error = None

    @property
    def is_applied(self) -> bool:
        return self.current is not None
