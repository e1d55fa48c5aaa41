"""Reservation lifecycle statuses and the operator transition table."""

from enum import Enum
from typing import Optional


class ReservationStatus(str, Enum):
    """Reservation lifecycle status.

    - pending: submitted by the guest, awaiting operator review (initial)
    - approved: accepted by the operator, deposit payment link sent
    - rejected: refused by the operator (terminal)
    - paid: deposit received (terminal)
    - cancelled: cancelled out of band (terminal)
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


class ReservationAction(str, Enum):
    """Operator actions that drive the lifecycle."""

    APPROVE = "approve"
    REJECT = "reject"
    MARK_PAID = "mark_paid"
    RESEND_PAYMENT = "resend_payment"


TERMINAL_STATUSES = frozenset(
    {ReservationStatus.REJECTED, ReservationStatus.PAID, ReservationStatus.CANCELLED}
)

# action -> (required current status, resulting status)
TRANSITIONS: dict[ReservationAction, tuple[ReservationStatus, ReservationStatus]] = {
    ReservationAction.APPROVE: (ReservationStatus.PENDING, ReservationStatus.APPROVED),
    ReservationAction.REJECT: (ReservationStatus.PENDING, ReservationStatus.REJECTED),
    ReservationAction.MARK_PAID: (ReservationStatus.APPROVED, ReservationStatus.PAID),
    ReservationAction.RESEND_PAYMENT: (ReservationStatus.APPROVED, ReservationStatus.APPROVED),
}

# Target status of a board column -> action that moves a reservation there
TARGET_STATUS_ACTIONS: dict[ReservationStatus, ReservationAction] = {
    ReservationStatus.APPROVED: ReservationAction.APPROVE,
    ReservationStatus.REJECTED: ReservationAction.REJECT,
    ReservationStatus.PAID: ReservationAction.MARK_PAID,
}


class TransitionTable:
    """Lookup helpers over the legal-transition table."""

    @staticmethod
    def can_apply(action: ReservationAction, current: ReservationStatus) -> bool:
        """Check whether ``action`` is legal from ``current``.

        Args:
            action: Operator action
            current: Current reservation status

        Returns:
            True if the transition table allows it
        """
        required, _ = TRANSITIONS[action]
        return current == required

    @staticmethod
    def result_of(action: ReservationAction) -> ReservationStatus:
        """Status a reservation ends in after ``action``."""
        return TRANSITIONS[action][1]

    @staticmethod
    def action_for_target(target: ReservationStatus) -> Optional[ReservationAction]:
        """Map a target status (e.g. a board column) to its action, if any."""
        return TARGET_STATUS_ACTIONS.get(target)

    @staticmethod
    def allowed_actions(current: ReservationStatus) -> list[ReservationAction]:
        """List the actions available from ``current``."""
        return [
            action
            for action, (required, _) in TRANSITIONS.items()
            if required == current
        ]
