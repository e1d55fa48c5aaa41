"""Pydantic models for promo codes and their validation results."""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PromoType(str, Enum):
    """How a promo discount is applied."""

    PERCENT = "percent"
    FIXED = "fixed"


class PromoErrorKind(str, Enum):
    """Reason a promo code was refused."""

    INVALID_CODE = "invalid_code"
    EXPIRED = "expired"
    MIN_NIGHTS_NOT_MET = "min_nights_not_met"
    INACTIVE = "inactive"
    NOT_YET_VALID = "not_yet_valid"
    USAGE_LIMIT_REACHED = "usage_limit_reached"


class PromoCode(BaseModel):
    """Promo code definition as held by the validation service."""

    code: str
    type: PromoType
    discount: Decimal = Field(ge=0)
    description: str = ""
    min_nights: Optional[int] = Field(None, alias="minNights")
    valid_from: Optional[date] = Field(None, alias="validFrom")
    expires_at: Optional[date] = Field(None, alias="validUntil")
    max_uses: Optional[int] = Field(None, alias="maxUses")
    used_count: int = Field(0, alias="usedCount")
    active: bool = True

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PromoAccepted(BaseModel):
    """Validated promo descriptor held for the current session."""

    valid: Literal[True] = True
    code: str
    discount: Decimal
    type: PromoType
    description: str = ""
    discount_amount: Decimal = Field(Decimal("0"), alias="discountAmount")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class PromoRejected(BaseModel):
    """Typed promo refusal."""

    valid: Literal[False] = False
    error: PromoErrorKind
    message: str = ""

    model_config = ConfigDict(frozen=True)


PromoValidation = Union[PromoAccepted, PromoRejected]
