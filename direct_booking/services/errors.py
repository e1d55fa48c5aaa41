"""Error taxonomy of the booking engine."""

from dataclasses import dataclass
from typing import Optional


class BookingError(Exception):
    """Base exception for booking engine errors."""

    pass


class ValidationError(BookingError):
    """Raised when a submission is malformed; no network call has been made."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class DatesUnavailable(BookingError):
    """Raised when the PMS reports the requested dates as taken."""

    pass


class UpstreamUnavailable(BookingError):
    """Raised when an external service needed to answer is unreachable."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service} unavailable: {message}")
        self.service = service


class ReservationNotFound(BookingError):
    """Raised when no reservation exists for the given id."""

    def __init__(self, reservation_id: str):
        super().__init__(f"Reservation not found: {reservation_id}")
        self.reservation_id = reservation_id


class InvalidTransition(BookingError):
    """Raised when an action is not legal from the reservation's current status."""

    def __init__(self, reservation_id: str, current_status: str, action: str):
        super().__init__(
            f"Cannot {action} reservation {reservation_id} in status {current_status}"
        )
        self.reservation_id = reservation_id
        self.current_status = current_status
        self.action = action


class Unauthorized(BookingError):
    """Raised when neither the link token nor an operator session grants access."""

    pass


@dataclass(frozen=True)
class BestEffortFailure:
    """Non-fatal side-effect failure reported alongside a committed transition."""

    operation: str
    error: str
