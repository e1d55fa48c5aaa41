"""Date-range selection over an availability index."""

from typing import Optional

from direct_booking.models.availability import AvailabilityDay, DateSelection
from direct_booking.services.availability_index import AvailabilityIndex


class DateRangeSelector:
    """Turns day clicks into a check-in / check-out selection.

    A completed selection never contains an unavailable night. Minimum-stay
    metadata is not enforced here; ``min_stay_for`` exposes it to callers.
    """

    def __init__(self, index: AvailabilityIndex):
        self.index = index

    def on_day_click(self, day: AvailabilityDay, current: DateSelection) -> DateSelection:
        """Apply a click on ``day`` to ``current``.

        Args:
            day: Clicked calendar day
            current: Selection before the click

        Returns:
            Selection after the click (``current`` itself for a no-op)
        """
        if not day.available:
            return current

        if current.check_in is None or current.is_complete:
            return DateSelection(check_in=day.date)

        if day.date < current.check_in:
            return DateSelection(check_in=day.date)

        if day.date == current.check_in:
            return DateSelection.empty()

        if self.index.nights_available(current.check_in, day.date):
            return DateSelection(check_in=current.check_in, check_out=day.date)

        # An unavailable night sits in between: start over from the clicked day
        return DateSelection(check_in=day.date)

    def click_date(self, clicked, current: DateSelection) -> DateSelection:
        """Same as ``on_day_click`` but looks the day up in the index.

        Dates missing from the index behave as unavailable days.
        """
        day = self.index.get(clicked)
        if day is None:
            return current
        return self.on_day_click(day, current)

    def is_in_range(self, day, selection: DateSelection) -> bool:
        """True if ``day`` falls between check-in and check-out, both inclusive."""
        if not selection.is_complete:
            return False
        return selection.check_in <= day <= selection.check_out

    def min_stay_for(self, selection: DateSelection) -> Optional[int]:
        """Minimum stay advertised for the check-in day, if any."""
        if selection.check_in is None:
            return None
        day = self.index.get(selection.check_in)
        return day.min_stay if day else None
