"""Submission pipeline step implementations."""

from .check_availability_step import CheckAvailabilityStep
from .create_reservation_step import CreateReservationStep
from .price_reservation_step import PriceReservationStep
from .send_notifications_step import NotifyGuestStep, NotifyOperatorStep
from .validate_input_step import ValidateInputStep

__all__ = [
    "CheckAvailabilityStep",
    "CreateReservationStep",
    "NotifyGuestStep",
    "NotifyOperatorStep",
    "PriceReservationStep",
    "ValidateInputStep",
]
