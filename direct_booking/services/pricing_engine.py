"""Deterministic stay pricing."""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from direct_booking.models.pricing import (
    BIWEEKLY_THRESHOLD,
    DEPOSIT_RATIO,
    DEPOSIT_STEP,
    MIN_DEPOSIT,
    MONTHLY_THRESHOLD,
    WEEKLY_THRESHOLD,
    DiscountConfig,
    PricingResult,
)
from direct_booking.models.promo_code import PromoAccepted, PromoType
from direct_booking.services.errors import ValidationError

_UNIT = Decimal("1")
_CENT = Decimal("0.01")


def round_half_up(value: Decimal, places: Decimal = _UNIT) -> Decimal:
    """Round to ``places`` with ties going up."""
    return value.quantize(places, rounding=ROUND_HALF_UP)


def stay_discount_percent(nights: int, config: DiscountConfig) -> Decimal:
    """Tiered long-stay discount, highest tier first, non-cumulative."""
    if nights >= MONTHLY_THRESHOLD:
        return config.monthly_discount
    if nights >= BIWEEKLY_THRESHOLD:
        return config.biweekly_discount
    if nights >= WEEKLY_THRESHOLD:
        return config.weekly_discount
    return Decimal("0")


def suggested_deposit(amount: Decimal) -> Decimal:
    """30% of ``amount`` rounded to the nearest 50, never below 100."""
    steps = round_half_up(amount * DEPOSIT_RATIO / DEPOSIT_STEP)
    return max(MIN_DEPOSIT, steps * DEPOSIT_STEP)


def promo_discount(base: Decimal, promo: PromoAccepted) -> Decimal:
    """Promo reduction applied to the post-stay-discount accommodation price."""
    if promo.type == PromoType.PERCENT:
        amount = round_half_up(base * promo.discount / Decimal("100"))
    else:
        amount = promo.discount
    return max(Decimal("0"), min(amount, base))


def calculate_pricing(
    check_in: date,
    check_out: date,
    guests: int,
    config: DiscountConfig,
    promo: Optional[PromoAccepted] = None,
) -> PricingResult:
    """Price a stay.

    Args:
        check_in: Arrival date
        check_out: Departure date
        guests: Number of guests (tourist tax is per guest per night)
        config: Published rates and discount percentages
        promo: Validated promo code to layer on top, if any

    Returns:
        Pricing breakdown

    Raises:
        ValidationError: If the stay has no nights or no guests
    """
    nights = (check_out - check_in).days
    if nights < 1:
        raise ValidationError("Departure date must be after arrival date", field="departure_date")
    if guests < 1:
        raise ValidationError("At least one guest is required", field="guests")

    discount_percent = stay_discount_percent(nights, config)
    subtotal = config.nightly_rate * nights
    discount_amount = round_half_up(subtotal * discount_percent / Decimal("100"))
    tourist_tax = round_half_up(config.tourist_tax_per_night * nights * guests, _CENT)
    total = subtotal - discount_amount + config.cleaning_fee + tourist_tax

    promo_amount = Decimal("0")
    if promo is not None:
        promo_amount = promo_discount(subtotal - discount_amount, promo)

    return PricingResult(
        nightly_rate=config.nightly_rate,
        nights=nights,
        subtotal=subtotal,
        discount_percent=discount_percent,
        discount_amount=discount_amount,
        cleaning_fee=config.cleaning_fee,
        tourist_tax=tourist_tax,
        total=total,
        deposit_suggested=suggested_deposit(total),
        promo_code=promo.code if promo else None,
        promo_discount_amount=promo_amount,
    )
