"""Operator board: reservations grouped by status, moved by drag and drop."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from structlog import get_logger

from direct_booking.models.reservation import Reservation
from direct_booking.models.reservation_status import ReservationStatus
from direct_booking.services.access_guard import Access
from direct_booking.services.errors import BookingError
from direct_booking.services.reservation_state_machine import (
    ReservationStateMachine,
    TransitionResult,
)

logger = get_logger(__name__)

COLUMNS: tuple[ReservationStatus, ...] = (
    ReservationStatus.PENDING,
    ReservationStatus.APPROVED,
    ReservationStatus.PAID,
    ReservationStatus.REJECTED,
    ReservationStatus.CANCELLED,
)


class DropOutcomeKind(str, Enum):
    """What happened to a dropped card."""

    NOOP = "noop"
    APPLIED = "applied"
    SNAPPED_BACK = "snapped_back"


@dataclass
class DropOutcome:
    """Result of dropping a card on a column.

    On ``snapped_back`` the card returns to ``status`` (its column before the
    drop) and ``error`` carries the reason.
    """

    kind: DropOutcomeKind
    reservation_id: str
    status: ReservationStatus
    error: Optional[str] = None
    result: Optional[TransitionResult] = None
    warnings: list = field(default_factory=list)


class KanbanBoard:
    """Maps board gestures onto state machine transitions."""

    def __init__(self, state_machine: ReservationStateMachine):
        """Initialize the board.

        Args:
            state_machine: Transitions behind every drop
        """
        self.state_machine = state_machine

    @staticmethod
    def group(reservations: Iterable[Reservation]) -> dict[ReservationStatus, list[Reservation]]:
        """Group reservations by column, newest first within each column."""
        columns: dict[ReservationStatus, list[Reservation]] = {status: [] for status in COLUMNS}
        for reservation in reservations:
            columns[reservation.status].append(reservation)
        for cards in columns.values():
            cards.sort(key=lambda r: r.created_at, reverse=True)
        return columns

    async def drop(
        self,
        reservation_id: str,
        column: ReservationStatus,
        current_status: ReservationStatus,
        access: Access,
    ) -> DropOutcome:
        """Move a card to ``column``.

        Args:
            reservation_id: Dragged reservation
            column: Column the card was dropped on
            current_status: Column the card was dragged from
            access: Credentials of the operator dragging the card

        Returns:
            DropOutcome; an unauthorized, refused or failed transition snaps the card back
        """
        if column == current_status:
            return DropOutcome(DropOutcomeKind.NOOP, reservation_id, current_status)

        try:
            result = await self.state_machine.request_transition(reservation_id, column, access)
        except BookingError as e:
            logger.info(
                "Card snapped back",
                reservation_id=reservation_id,
                column=column.value,
                error=str(e),
            )
            return DropOutcome(
                DropOutcomeKind.SNAPPED_BACK,
                reservation_id,
                current_status,
                error=str(e),
            )

        kind = DropOutcomeKind.APPLIED if result.applied else DropOutcomeKind.NOOP
        return DropOutcome(
            kind,
            reservation_id,
            result.reservation.status,
            result=result,
            warnings=list(result.warnings),
        )
