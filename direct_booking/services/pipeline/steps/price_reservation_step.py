"""Step to price the submitted stay."""

from typing import Optional

from direct_booking.models.pricing import DiscountConfig
from direct_booking.models.promo_code import PromoAccepted
from direct_booking.services.pipeline import PipelineStep, SubmissionContext
from direct_booking.services.pricing_engine import calculate_pricing
from direct_booking.services.promo_code_validator import PromoCodeValidator


class PriceReservationStep(PipelineStep):
    """Compute the price, layering a promo code when one is submitted.

    A refused promo code does not fail the submission: the stay is priced
    without it and the refusal stays on the context.
    """

    def __init__(self, config: DiscountConfig, promo_validator: Optional[PromoCodeValidator] = None):
        super().__init__("PriceReservation")
        self.config = config
        self.promo_validator = promo_validator

    async def execute(self, context: SubmissionContext) -> bool:
        submission = context.submission
        pricing = calculate_pricing(
            submission.arrival_date,
            submission.departure_date,
            submission.guests,
            self.config,
        )

        if submission.promo_code and self.promo_validator is not None:
            validation = await self.promo_validator.validate(
                submission.promo_code,
                pricing.nights,
                pricing.subtotal - pricing.discount_amount,
            )
            context.promo_validation = validation
            if isinstance(validation, PromoAccepted):
                pricing = calculate_pricing(
                    submission.arrival_date,
                    submission.departure_date,
                    submission.guests,
                    self.config,
                    promo=validation,
                )
            else:
                self.logger.info(
                    "Promo code refused, pricing without it",
                    code=submission.promo_code,
                    error_kind=validation.error.value,
                )

        context.pricing = pricing
        context.stats["pricing"] = {
            "nights": pricing.nights,
            "total": str(pricing.total),
            "amount_due": str(pricing.amount_due),
        }
        return True
