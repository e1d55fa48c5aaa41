"""Context shared between submission pipeline steps."""

from datetime import date, datetime, timezone
from typing import Any, Optional

from direct_booking.models.pricing import PricingResult
from direct_booking.models.promo_code import PromoValidation
from direct_booking.models.reservation import Reservation, ReservationInput
from direct_booking.services.errors import BestEffortFailure


class SubmissionContext:
    """Accumulates the results of a guest submission as the pipeline runs."""

    def __init__(self, payload: dict[str, Any], today: Optional[date] = None):
        """Initialize submission context.

        Args:
            payload: Raw submission (camelCase or snake_case keys)
            today: Reference date for the arrival check; defaults to today
        """
        self.payload = payload
        self.today = today or date.today()
        self.start_time = datetime.now(timezone.utc)

        # Parsed input
        self.submission: Optional[ReservationInput] = None

        # Upstream answers
        self.dates_available: Optional[bool] = None
        self.promo_validation: Optional[PromoValidation] = None

        # Results
        self.pricing: Optional[PricingResult] = None
        self.reservation: Optional[Reservation] = None

        # Fatal errors, in the order they happened
        self.errors: list[dict[str, Any]] = []

        # Side effects that failed without failing the submission
        self.warnings: list[BestEffortFailure] = []

        self.stats: dict[str, Any] = {}
        self.success: bool = False

    @property
    def reservation_id(self) -> Optional[str]:
        return self.reservation.id if self.reservation else None

    def add_error(self, step_name: str, error: Exception) -> None:
        """Record the exception that failed a step.

        Args:
            step_name: Name of the step where error occurred
            error: Exception raised by the step
        """
        self.errors.append({
            "step": step_name,
            "message": str(error),
            "exception": error,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    def add_warning(self, failure: BestEffortFailure) -> None:
        self.warnings.append(failure)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def first_error(self) -> Optional[Exception]:
        return self.errors[0]["exception"] if self.errors else None

    def get_results(self) -> dict[str, Any]:
        """Get final results dictionary.

        Returns:
            Dictionary summarizing the submission
        """
        end_time = datetime.now(timezone.utc)
        return {
            "reservation_id": self.reservation_id,
            "success": self.success,
            "duration_seconds": (end_time - self.start_time).total_seconds(),
            "errors": [{"step": e["step"], "message": e["message"]} for e in self.errors],
            "warnings": [{"operation": w.operation, "error": w.error} for w in self.warnings],
            "stats": self.stats,
        }
