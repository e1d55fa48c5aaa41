"""Guest-facing reservation service: quotes and submissions."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from structlog import get_logger

from direct_booking.clients.reservation_store import ReservationStore
from direct_booking.clients.smoobu_client import SmoobuClient
from direct_booking.config import settings
from direct_booking.models.pricing import DiscountConfig, PricingResult
from direct_booking.models.promo_code import PromoAccepted, PromoValidation
from direct_booking.models.reservation import Reservation, ReservationEventType
from direct_booking.services.errors import BestEffortFailure, BookingError
from direct_booking.services.events import EventBus
from direct_booking.services.notifications import NotificationService
from direct_booking.services.pipeline import Pipeline, SubmissionContext
from direct_booking.services.pipeline.steps import (
    CheckAvailabilityStep,
    CreateReservationStep,
    NotifyGuestStep,
    NotifyOperatorStep,
    PriceReservationStep,
    ValidateInputStep,
)
from direct_booking.services.pricing_engine import calculate_pricing
from direct_booking.services.promo_code_validator import PromoCodeValidator

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    reservation: Reservation
    promo_validation: Optional[PromoValidation] = None
    warnings: list[BestEffortFailure] = field(default_factory=list)


class ReservationService:
    """Runs guest submissions through the submission pipeline."""

    def __init__(
        self,
        store: ReservationStore,
        smoobu_client: SmoobuClient,
        notifications: NotificationService,
        event_bus: Optional[EventBus] = None,
        promo_validator: Optional[PromoCodeValidator] = None,
        config: Optional[DiscountConfig] = None,
    ):
        self.store = store
        self.event_bus = event_bus or EventBus()
        self.promo_validator = promo_validator
        self.config = config or DiscountConfig.from_settings(settings.pricing)
        self.pipeline = Pipeline(
            "reservation-submission",
            [
                ValidateInputStep(),
                CheckAvailabilityStep(smoobu_client),
                PriceReservationStep(self.config, promo_validator),
                CreateReservationStep(store),
                NotifyGuestStep(notifications),
                NotifyOperatorStep(notifications),
            ],
        )

    async def submit(self, payload: dict[str, Any], today: Optional[date] = None) -> SubmissionResult:
        """Create a pending reservation from a guest submission.

        Args:
            payload: Raw submission fields
            today: Reference date for the arrival check

        Returns:
            The stored reservation and any failed notifications

        Raises:
            ValidationError: If the submission is malformed
            DatesUnavailable: If the dates are taken
            UpstreamUnavailable: If a service needed to accept the request is down
        """
        context = await self.pipeline.execute(SubmissionContext(payload, today=today))

        if not context.success:
            error = context.first_error
            if isinstance(error, BookingError):
                raise error
            raise BookingError(f"Submission failed: {error}") from error

        await self.event_bus.publish(ReservationEventType.CREATED, context.reservation)
        logger.info(
            "Reservation submitted",
            reservation_id=context.reservation.id,
            warnings=len(context.warnings),
        )
        return SubmissionResult(
            reservation=context.reservation,
            promo_validation=context.promo_validation,
            warnings=context.warnings,
        )

    async def quote(
        self,
        check_in: date,
        check_out: date,
        guests: int,
        promo_code: Optional[str] = None,
    ) -> tuple[PricingResult, Optional[PromoValidation]]:
        """Price a stay without creating anything.

        Returns:
            Tuple of (pricing, promo validation or None when no code was given)
        """
        pricing = calculate_pricing(check_in, check_out, guests, self.config)
        if not promo_code or self.promo_validator is None:
            return pricing, None

        validation = await self.promo_validator.validate(
            promo_code, pricing.nights, pricing.subtotal - pricing.discount_amount
        )
        if isinstance(validation, PromoAccepted):
            pricing = calculate_pricing(check_in, check_out, guests, self.config, promo=validation)
        return pricing, validation
