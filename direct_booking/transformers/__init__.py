"""Data transformation package."""

from direct_booking.transformers.booking_transformer import BookingTransformer
from direct_booking.transformers.rates_transformer import RatesTransformer

__all__ = [
    "BookingTransformer",
    "RatesTransformer",
]
