"""Availability index assembled from successive rates-feed fetches."""

import asyncio
import calendar
from datetime import date, timedelta
from typing import Iterable, Iterator, Optional

from structlog import get_logger

from direct_booking.clients.smoobu_client import SmoobuClient, SmoobuClientError
from direct_booking.models.availability import AvailabilityDay
from direct_booking.services.errors import UpstreamUnavailable
from direct_booking.transformers.rates_transformer import RatesTransformer

logger = get_logger(__name__)


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """Yield every night of a stay: ``[check_in, check_out)``."""
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


class AvailabilityIndex:
    """Mapping of date to availability day.

    Later merges overwrite earlier ones for the same date, unconditionally.
    """

    def __init__(self, days: Optional[Iterable[AvailabilityDay]] = None):
        self._days: dict[date, AvailabilityDay] = {}
        if days:
            self.merge(days)

    def merge(self, days: Iterable[AvailabilityDay]) -> int:
        """Merge fetched days, last write wins.

        Returns:
            Number of days merged
        """
        count = 0
        for day in days:
            self._days[day.date] = day
            count += 1
        return count

    def get(self, day: date) -> Optional[AvailabilityDay]:
        return self._days.get(day)

    def is_available(self, day: date) -> bool:
        """Unknown dates count as unavailable."""
        entry = self._days.get(day)
        return entry is not None and entry.available

    def nights_available(self, check_in: date, check_out: date) -> bool:
        """Check that every night in ``[check_in, check_out)`` is available."""
        return all(self.is_available(night) for night in iter_nights(check_in, check_out))

    def days(self) -> list[AvailabilityDay]:
        return [self._days[d] for d in sorted(self._days)]

    def __len__(self) -> int:
        return len(self._days)

    def __contains__(self, day: date) -> bool:
        return day in self._days


def month_windows(first_month: date, months: int) -> list[tuple[date, date]]:
    """Calendar-month windows ``(first day, last day)`` starting at ``first_month``."""
    windows = []
    year, month = first_month.year, first_month.month
    for _ in range(months):
        last_day = calendar.monthrange(year, month)[1]
        windows.append((date(year, month, 1), date(year, month, last_day)))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return windows


class AvailabilityLoader:
    """Fetches calendar months from the rates feed into an index.

    Windows are requested concurrently and each response is merged as soon
    as it arrives, so arrival order decides which data wins on overlap.
    """

    def __init__(self, smoobu_client: SmoobuClient, index: Optional[AvailabilityIndex] = None):
        self.smoobu_client = smoobu_client
        self.index = index if index is not None else AvailabilityIndex()

    async def _fetch_window(self, start: date, end: date) -> list[AvailabilityDay]:
        try:
            response = await self.smoobu_client.get_rates(start.isoformat(), end.isoformat())
        except SmoobuClientError as e:
            logger.error(
                "Failed to fetch availability window",
                start_date=start.isoformat(),
                end_date=end.isoformat(),
                error=str(e),
            )
            raise UpstreamUnavailable("rates feed", str(e)) from e
        return RatesTransformer.transform(response, self.smoobu_client.apartment_id)

    async def load_months(self, first_month: date, months: int = 1) -> AvailabilityIndex:
        """Fetch ``months`` calendar months and merge them into the index.

        Args:
            first_month: Any day of the first month to load
            months: Number of consecutive months

        Returns:
            The updated index

        Raises:
            UpstreamUnavailable: If any window fails; windows already merged stay merged
        """
        windows = month_windows(first_month, months)
        logger.info(
            "Loading availability",
            first_month=first_month.strftime("%Y-%m"),
            months=months,
        )

        tasks = [asyncio.ensure_future(self._fetch_window(start, end)) for start, end in windows]
        try:
            for next_done in asyncio.as_completed(tasks):
                days = await next_done
                self.index.merge(days)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            # Collect cancelled and failed siblings so no task outlives the call
            await asyncio.gather(*tasks, return_exceptions=True)
            if pending:
                logger.warning("Cancelled pending availability windows", cancelled=len(pending))

        logger.info("Availability loaded", days=len(self.index))
        return self.index
