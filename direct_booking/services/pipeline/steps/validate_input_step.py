"""Step to validate the guest submission before any network call."""

from pydantic import ValidationError as PydanticValidationError

from direct_booking.config import settings
from direct_booking.models.reservation import ReservationInput
from direct_booking.services.errors import ValidationError
from direct_booking.services.pipeline import PipelineStep, SubmissionContext


class ValidateInputStep(PipelineStep):
    """Parse the payload and check the stay makes sense."""

    def __init__(self, max_guests: int | None = None):
        """Initialize the step.

        Args:
            max_guests: Capacity of the unit; defaults to ``PRICING_MAX_GUESTS``
        """
        super().__init__("ValidateInput")
        self.max_guests = max_guests or settings.pricing.max_guests

    async def execute(self, context: SubmissionContext) -> bool:
        """Validate the submission.

        Raises:
            ValidationError: On a missing or malformed field
        """
        try:
            submission = ReservationInput.model_validate(context.payload)
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise ValidationError(f"Invalid {field}: {first['msg']}", field=field) from e

        for field in ("first_name", "last_name", "phone"):
            if not getattr(submission, field):
                raise ValidationError(f"{field} is required", field=field)

        if submission.arrival_date < context.today:
            raise ValidationError("Arrival date is in the past", field="arrival_date")
        if submission.departure_date <= submission.arrival_date:
            raise ValidationError("Departure date must be after arrival date", field="departure_date")
        if not 1 <= submission.guests <= self.max_guests:
            raise ValidationError(
                f"Guests must be between 1 and {self.max_guests}",
                field="guests",
            )

        context.submission = submission
        return True
