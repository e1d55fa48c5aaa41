"""Pydantic models for stay pricing."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# Tier thresholds in nights, highest first
MONTHLY_THRESHOLD = 28
BIWEEKLY_THRESHOLD = 14
WEEKLY_THRESHOLD = 7

MIN_DEPOSIT = Decimal("100")
DEPOSIT_RATIO = Decimal("0.30")
DEPOSIT_STEP = Decimal("50")


class DiscountConfig(BaseModel):
    """Published rates and long-stay discount percentages for one deployment."""

    nightly_rate: Decimal = Field(Decimal("120"), alias="nightlyRate", ge=0)
    cleaning_fee: Decimal = Field(Decimal("50"), alias="cleaningFee", ge=0)
    tourist_tax_per_night: Decimal = Field(Decimal("2.88"), alias="touristTaxPerNight", ge=0)
    weekly_discount: Decimal = Field(Decimal("10"), alias="weeklyDiscount", ge=0, le=100)
    biweekly_discount: Decimal = Field(Decimal("15"), alias="biweeklyDiscount", ge=0, le=100)
    monthly_discount: Decimal = Field(Decimal("20"), alias="monthlyDiscount", ge=0, le=100)

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_settings(cls, pricing_settings) -> "DiscountConfig":
        """Build the config from ``settings.pricing``."""
        return cls(
            nightly_rate=pricing_settings.nightly_rate,
            cleaning_fee=pricing_settings.cleaning_fee,
            tourist_tax_per_night=pricing_settings.tourist_tax_per_night,
            weekly_discount=pricing_settings.weekly_discount,
            biweekly_discount=pricing_settings.biweekly_discount,
            monthly_discount=pricing_settings.monthly_discount,
        )


class PricingResult(BaseModel):
    """Computed price of a stay.

    ``total`` is always ``subtotal - discount_amount + cleaning_fee + tourist_tax``.
    A promo-code reduction is tracked in ``promo_discount_amount`` and only
    affects ``amount_due``; the suggested deposit is always based on ``total``.
    """

    nightly_rate: Decimal = Field(alias="nightlyRate")
    nights: int
    subtotal: Decimal
    discount_percent: Decimal = Field(alias="discountPercent")
    discount_amount: Decimal = Field(alias="discountAmount")
    cleaning_fee: Decimal = Field(alias="cleaningFee")
    tourist_tax: Decimal = Field(alias="touristTax")
    total: Decimal
    deposit_suggested: Decimal = Field(alias="depositSuggested")
    promo_code: Optional[str] = Field(None, alias="promoCode")
    promo_discount_amount: Decimal = Field(Decimal("0"), alias="promoDiscountAmount")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def amount_due(self) -> Decimal:
        """Total after the promo-code reduction."""
        return self.total - self.promo_discount_amount

    @property
    def has_stay_discount(self) -> bool:
        return self.discount_amount > 0

    @property
    def has_promo_discount(self) -> bool:
        return self.promo_discount_amount > 0
