"""Data models package."""

from direct_booking.models.availability import AvailabilityDay, DateSelection, DayRate
from direct_booking.models.pricing import DiscountConfig, PricingResult
from direct_booking.models.promo_code import (
    PromoAccepted,
    PromoCode,
    PromoErrorKind,
    PromoRejected,
    PromoType,
    PromoValidation,
)
from direct_booking.models.reservation import (
    Reservation,
    ReservationEvent,
    ReservationEventType,
    ReservationInput,
)
from direct_booking.models.reservation_status import (
    ReservationAction,
    ReservationStatus,
    TransitionTable,
)

__all__ = [
    "AvailabilityDay",
    "DateSelection",
    "DayRate",
    "DiscountConfig",
    "PricingResult",
    "PromoAccepted",
    "PromoCode",
    "PromoErrorKind",
    "PromoRejected",
    "PromoType",
    "PromoValidation",
    "Reservation",
    "ReservationEvent",
    "ReservationEventType",
    "ReservationInput",
    "ReservationAction",
    "ReservationStatus",
    "TransitionTable",
]
