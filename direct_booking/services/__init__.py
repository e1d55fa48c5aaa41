"""Business services package."""

from direct_booking.services.access_guard import (
    AccessGuard,
    AccessRequest,
    Capability,
    Denied,
    FullAccess,
    SingleReservationAccess,
)
from direct_booking.services.admin_session import (
    AdminSessionContext,
    AdminSessionGuard,
    SessionState,
)
from direct_booking.services.availability_index import AvailabilityIndex, AvailabilityLoader
from direct_booking.services.confirmation_token import ConfirmationTokenService
from direct_booking.services.date_range_selector import DateRangeSelector
from direct_booking.services.errors import (
    BestEffortFailure,
    BookingError,
    DatesUnavailable,
    InvalidTransition,
    ReservationNotFound,
    Unauthorized,
    UpstreamUnavailable,
    ValidationError,
)
from direct_booking.services.events import EventBus
from direct_booking.services.kanban import DropOutcome, DropOutcomeKind, KanbanBoard
from direct_booking.services.notifications import NotificationService
from direct_booking.services.operator_auth import OperatorAuthService
from direct_booking.services.payment_webhook import PaymentWebhookHandler
from direct_booking.services.pricing_engine import calculate_pricing
from direct_booking.services.promo_code_validator import (
    AppliedPromo,
    PromoCodeCatalog,
    PromoCodeValidator,
)
from direct_booking.services.reservation_service import ReservationService, SubmissionResult
from direct_booking.services.reservation_state_machine import (
    ReservationStateMachine,
    TransitionResult,
)

__all__ = [
    "AccessGuard",
    "AccessRequest",
    "Capability",
    "Denied",
    "FullAccess",
    "SingleReservationAccess",
    "AdminSessionContext",
    "AdminSessionGuard",
    "SessionState",
    "AvailabilityIndex",
    "AvailabilityLoader",
    "ConfirmationTokenService",
    "DateRangeSelector",
    "BestEffortFailure",
    "BookingError",
    "DatesUnavailable",
    "InvalidTransition",
    "ReservationNotFound",
    "Unauthorized",
    "UpstreamUnavailable",
    "ValidationError",
    "EventBus",
    "DropOutcome",
    "DropOutcomeKind",
    "KanbanBoard",
    "NotificationService",
    "OperatorAuthService",
    "PaymentWebhookHandler",
    "calculate_pricing",
    "AppliedPromo",
    "PromoCodeCatalog",
    "PromoCodeValidator",
    "ReservationService",
    "SubmissionResult",
    "ReservationStateMachine",
    "TransitionResult",
]
