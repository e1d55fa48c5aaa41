"""Transformer for Smoobu rates feed responses."""

from datetime import date
from typing import Any

from structlog import get_logger

from direct_booking.models.availability import AvailabilityDay, DayRate

logger = get_logger(__name__)


class RatesTransformer:
    """Transform Smoobu ``/rates`` responses into availability days."""

    @staticmethod
    def transform(
        rates_response: dict[str, Any],
        apartment_id: str,
    ) -> list[AvailabilityDay]:
        """Transform the rates payload of a single apartment.

        The feed returns ``{"data": {apartmentId: {date: {price, available,
        min_length_of_stay}}}}``. Days that fail validation are skipped and
        logged; they are never synthesized.

        Args:
            rates_response: Raw JSON response from the rates endpoint
            apartment_id: Apartment whose calendar should be extracted

        Returns:
            Availability days sorted by date
        """
        apartment_rates = (rates_response.get("data") or {}).get(str(apartment_id)) or {}

        logger.debug(
            "Transforming rates response",
            apartment_id=apartment_id,
            total_days=len(apartment_rates),
        )

        days: list[AvailabilityDay] = []
        failed_count = 0

        for day_str, raw in apartment_rates.items():
            try:
                rate = DayRate(**raw)
                days.append(
                    AvailabilityDay(
                        date=date.fromisoformat(day_str),
                        price=rate.price,
                        available=rate.available == 1,
                        min_stay=rate.min_length_of_stay,
                    )
                )
            except (TypeError, ValueError) as e:
                logger.warning(
                    "Failed to transform rate day",
                    apartment_id=apartment_id,
                    day=day_str,
                    error=str(e),
                )
                failed_count += 1

        days.sort(key=lambda d: d.date)

        logger.debug(
            "Rates transformation complete",
            apartment_id=apartment_id,
            transformed=len(days),
            failed=failed_count,
        )
        return days
