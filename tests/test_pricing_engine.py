"""Unit tests for stay pricing."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from direct_booking.models.pricing import DiscountConfig
from direct_booking.models.promo_code import PromoAccepted, PromoType
from direct_booking.services.errors import ValidationError
from direct_booking.services.pricing_engine import (
    calculate_pricing,
    promo_discount,
    stay_discount_percent,
    suggested_deposit,
)

CHECK_IN = date(2026, 6, 1)


def _stay(nights: int) -> tuple[date, date]:
    return CHECK_IN, CHECK_IN + timedelta(days=nights)


class TestStayDiscount:
    """Tests for the tiered long-stay discount."""

    @pytest.mark.parametrize(
        "nights,expected",
        [(1, 0), (6, 0), (7, 10), (13, 10), (14, 15), (27, 15), (28, 20), (60, 20)],
    )
    def test_tier_boundaries(self, nights, expected):
        assert stay_discount_percent(nights, DiscountConfig()) == Decimal(expected)

    def test_custom_percentages(self):
        config = DiscountConfig(weekly_discount=Decimal("5"), monthly_discount=Decimal("30"))
        assert stay_discount_percent(7, config) == Decimal("5")
        assert stay_discount_percent(30, config) == Decimal("30")


class TestSuggestedDeposit:
    """Tests for the deposit suggestion."""

    @pytest.mark.parametrize(
        "amount",
        ["0", "1", "99.99", "333.33", "846.32", "1665.32", "4999.99", "12345.67"],
    )
    def test_multiple_of_fifty_never_below_hundred(self, amount):
        deposit = suggested_deposit(Decimal(amount))
        assert deposit % 50 == 0
        assert deposit >= 100

    def test_rounds_to_nearest_fifty(self):
        # 30% of 1000 = 300
        assert suggested_deposit(Decimal("1000")) == Decimal("300")
        # 30% of 1100 = 330 -> 6.6 steps -> 350
        assert suggested_deposit(Decimal("1100")) == Decimal("350")
        # 30% of 1250 = 375 -> 7.5 steps, ties round up -> 400
        assert suggested_deposit(Decimal("1250")) == Decimal("400")

    def test_minimum_applies_to_small_stays(self):
        assert suggested_deposit(Decimal("200")) == Decimal("100")


class TestCalculatePricing:
    """Tests for calculate_pricing."""

    def test_seven_night_scenario(self):
        config = DiscountConfig(
            nightly_rate=Decimal("250"),
            cleaning_fee=Decimal("50"),
            tourist_tax_per_night=Decimal("2.88"),
        )

        result = calculate_pricing(*_stay(7), guests=2, config=config)

        assert result.nights == 7
        assert result.subtotal == Decimal("1750")
        assert result.discount_percent == Decimal("10")
        assert result.discount_amount == Decimal("175")
        assert result.tourist_tax == Decimal("40.32")
        assert result.total == Decimal("1665.32")
        assert result.deposit_suggested == Decimal("500")
        assert result.amount_due == result.total

    @pytest.mark.parametrize("nights", [1, 3, 6, 7, 10, 13, 14, 20, 27, 28, 45])
    @pytest.mark.parametrize("guests", [1, 2, 4])
    def test_total_identity_holds(self, nights, guests):
        result = calculate_pricing(*_stay(nights), guests=guests, config=DiscountConfig())

        assert result.total == (
            result.subtotal - result.discount_amount + result.cleaning_fee + result.tourist_tax
        )

    def test_short_stay_has_no_discount(self):
        result = calculate_pricing(*_stay(3), guests=1, config=DiscountConfig())

        assert result.discount_amount == Decimal("0")
        assert not result.has_stay_discount
        assert result.total == Decimal("360") + Decimal("50") + Decimal("8.64")

    def test_checkout_before_checkin_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_pricing(CHECK_IN, CHECK_IN, guests=2, config=DiscountConfig())
        assert exc_info.value.field == "departure_date"

    def test_zero_guests_is_rejected(self):
        with pytest.raises(ValidationError):
            calculate_pricing(*_stay(3), guests=0, config=DiscountConfig())


class TestPromoLayer:
    """Tests for promo codes layered on top of the stay price."""

    def test_percent_promo_applies_after_stay_discount(self):
        promo = PromoAccepted(code="WELCOME10", discount=Decimal("10"), type=PromoType.PERCENT)

        result = calculate_pricing(*_stay(7), guests=2, config=DiscountConfig(), promo=promo)

        # 840 - 84 = 756 accommodation, 10% -> 75.6 -> 76
        assert result.promo_code == "WELCOME10"
        assert result.promo_discount_amount == Decimal("76")
        assert result.amount_due == result.total - Decimal("76")
        assert result.has_promo_discount

    def test_deposit_is_computed_on_total_when_promo_applied(self):
        promo = PromoAccepted(code="BIG", discount=Decimal("500"), type=PromoType.FIXED)

        result = calculate_pricing(*_stay(7), guests=2, config=DiscountConfig(), promo=promo)

        # 846.32 x 0.30 = 253.9 -> 5 steps of 50; the promo does not lower it
        assert result.amount_due == Decimal("346.32")
        assert result.deposit_suggested == Decimal("250")
        assert result.deposit_suggested == suggested_deposit(result.total)

    def test_fixed_promo_is_capped_at_accommodation_price(self):
        promo = PromoAccepted(code="HUGE", discount=Decimal("5000"), type=PromoType.FIXED)

        assert promo_discount(Decimal("756"), promo) == Decimal("756")

    def test_total_identity_unaffected_by_promo(self):
        promo = PromoAccepted(code="WELCOME10", discount=Decimal("10"), type=PromoType.PERCENT)

        result = calculate_pricing(*_stay(14), guests=3, config=DiscountConfig(), promo=promo)

        assert result.total == (
            result.subtotal - result.discount_amount + result.cleaning_fee + result.tourist_tax
        )
