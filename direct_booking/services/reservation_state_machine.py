"""Reservation lifecycle transitions triggered by the operator."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from structlog import get_logger

from direct_booking.clients.reservation_store import ReservationStore
from direct_booking.clients.smoobu_client import SmoobuClient, SmoobuClientError
from direct_booking.clients.stripe_client import PaymentLinkError, StripePaymentLinkClient
from direct_booking.models.reservation import Reservation, ReservationEventType
from direct_booking.models.reservation_status import (
    ReservationAction,
    ReservationStatus,
    TransitionTable,
)
from direct_booking.services.access_guard import Access, AccessGuard, Capability
from direct_booking.services.errors import (
    BestEffortFailure,
    InvalidTransition,
    ReservationNotFound,
    UpstreamUnavailable,
    ValidationError,
)
from direct_booking.services.events import EventBus
from direct_booking.services.notifications import NotificationService
from direct_booking.transformers.booking_transformer import BookingTransformer

logger = get_logger(__name__)


@dataclass
class TransitionResult:
    """Outcome of an operator action.

    ``applied`` is False only for no-op requests (target status already
    reached). ``warnings`` lists side effects that failed after the status
    change was committed.
    """

    reservation: Reservation
    action: Optional[ReservationAction]
    applied: bool = True
    warnings: list[BestEffortFailure] = field(default_factory=list)

    @property
    def payment_link_url(self) -> Optional[str]:
        return self.reservation.stripe_payment_link_url


class ReservationStateMachine:
    """Owns the legal transitions of a reservation and their side effects.

    Every operation first authorizes the caller against the reservation it
    targets, then re-fetches the reservation, checks the transition table,
    commits the new status in one store write and runs its side effects.
    A failing side effect never rolls back the status.
    """

    def __init__(
        self,
        store: ReservationStore,
        payment_client: StripePaymentLinkClient,
        notifications: NotificationService,
        smoobu_client: SmoobuClient,
        event_bus: Optional[EventBus] = None,
        access_guard: Optional[AccessGuard] = None,
    ):
        self.store = store
        self.access_guard = access_guard or AccessGuard(store)
        self.payment_client = payment_client
        self.notifications = notifications
        self.smoobu_client = smoobu_client
        self.event_bus = event_bus or EventBus()

    async def _authorize(self, access: Access, reservation_id: str) -> Capability:
        return await self.access_guard.authorize(access, reservation_id)

    async def _load(self, reservation_id: str) -> Reservation:
        reservation = await self.store.get(reservation_id)
        if reservation is None:
            raise ReservationNotFound(reservation_id)
        return reservation

    def _check(self, reservation: Reservation, action: ReservationAction) -> None:
        if not TransitionTable.can_apply(action, reservation.status):
            logger.warning(
                "Rejected illegal transition",
                reservation_id=reservation.id,
                action=action.value,
                status=reservation.status.value,
            )
            raise InvalidTransition(reservation.id, reservation.status.value, action.value)

    async def _commit(self, reservation_id: str, changes: dict) -> Reservation:
        updated = await self.store.update(reservation_id, changes)
        if updated is None:
            raise ReservationNotFound(reservation_id)
        return updated

    async def approve(
        self,
        reservation_id: str,
        access: Access,
        deposit_amount: Optional[Decimal] = None,
        admin_notes: Optional[str] = None,
    ) -> TransitionResult:
        """Approve a pending reservation and send the deposit payment link.

        Args:
            reservation_id: Reservation to approve
            access: Caller credentials or an already-resolved capability
            deposit_amount: Deposit requested; defaults to the stored suggestion
            admin_notes: Optional operator notes

        Returns:
            Transition result; a failed link or email shows up in ``warnings``

        Raises:
            Unauthorized: If ``access`` does not cover the reservation
            ReservationNotFound: If the reservation does not exist
            InvalidTransition: If the reservation is not pending
            ValidationError: If the deposit is not positive
        """
        await self._authorize(access, reservation_id)
        reservation = await self._load(reservation_id)
        self._check(reservation, ReservationAction.APPROVE)

        deposit = Decimal(deposit_amount) if deposit_amount is not None else reservation.deposit_amount
        if deposit <= 0:
            raise ValidationError("Deposit amount must be positive", field="deposit_amount")

        warnings: list[BestEffortFailure] = []
        changes: dict = {
            "status": TransitionTable.result_of(ReservationAction.APPROVE),
            "deposit_amount": deposit,
        }
        if admin_notes:
            changes["admin_notes"] = admin_notes

        try:
            link = await self.payment_client.create_link(deposit, reservation)
            changes["stripe_payment_link_id"] = link.id
            changes["stripe_payment_link_url"] = link.url
        except PaymentLinkError as e:
            logger.warning(
                "Payment link creation failed, approving without link",
                reservation_id=reservation_id,
                error=str(e),
            )
            warnings.append(BestEffortFailure("payment_link", str(e)))

        updated = await self._commit(reservation_id, changes)
        logger.info("Reservation approved", reservation_id=reservation_id, deposit=str(deposit))

        if updated.stripe_payment_link_url:
            failure = await self.notifications.reservation_approved(updated, updated.stripe_payment_link_url)
            if failure:
                warnings.append(failure)

        await self.event_bus.publish(ReservationEventType.APPROVED, updated)
        return TransitionResult(updated, ReservationAction.APPROVE, warnings=warnings)

    async def reject(
        self,
        reservation_id: str,
        access: Access,
        reason: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> TransitionResult:
        """Reject a pending reservation.

        Raises:
            Unauthorized: If ``access`` does not cover the reservation
            ReservationNotFound: If the reservation does not exist
            InvalidTransition: If the reservation is not pending, including already rejected
        """
        await self._authorize(access, reservation_id)
        reservation = await self._load(reservation_id)
        self._check(reservation, ReservationAction.REJECT)

        warnings: list[BestEffortFailure] = []
        changes: dict = {
            "status": TransitionTable.result_of(ReservationAction.REJECT),
            "rejection_reason": reason,
        }
        if admin_notes or reason:
            changes["admin_notes"] = admin_notes or reason

        updated = await self._commit(reservation_id, changes)
        logger.info("Reservation rejected", reservation_id=reservation_id)

        if updated.smoobu_reservation_id:
            try:
                await self.smoobu_client.cancel_reservation(updated.smoobu_reservation_id)
            except SmoobuClientError as e:
                logger.warning(
                    "Failed to release PMS booking",
                    reservation_id=reservation_id,
                    smoobu_reservation_id=updated.smoobu_reservation_id,
                    error=str(e),
                )
                warnings.append(BestEffortFailure("pms_cancel", str(e)))

        failure = await self.notifications.reservation_rejected(updated, reason)
        if failure:
            warnings.append(failure)

        await self.event_bus.publish(ReservationEventType.REJECTED, updated)
        return TransitionResult(updated, ReservationAction.REJECT, warnings=warnings)

    async def mark_paid(
        self,
        reservation_id: str,
        access: Access,
        payment_intent_id: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> TransitionResult:
        """Record the deposit payment and block the dates in the PMS.

        Raises:
            Unauthorized: If ``access`` does not cover the reservation
            ReservationNotFound: If the reservation does not exist
            InvalidTransition: If the reservation is not approved
        """
        await self._authorize(access, reservation_id)
        reservation = await self._load(reservation_id)
        self._check(reservation, ReservationAction.MARK_PAID)

        warnings: list[BestEffortFailure] = []
        changes: dict = {
            "status": TransitionTable.result_of(ReservationAction.MARK_PAID),
            "deposit_paid": True,
        }
        if payment_intent_id:
            changes["stripe_payment_intent_id"] = payment_intent_id
        if admin_notes:
            changes["admin_notes"] = admin_notes

        updated = await self._commit(reservation_id, changes)
        logger.info("Reservation marked paid", reservation_id=reservation_id)

        failure = await self.notifications.payment_confirmed(updated)
        if failure:
            warnings.append(failure)

        if not updated.smoobu_reservation_id:
            try:
                booking = BookingTransformer.transform(
                    updated,
                    apartment_id=self.smoobu_client.apartment_id,
                    channel_id=self.smoobu_client.channel_id,
                )
                smoobu_id = await self.smoobu_client.create_reservation(booking)
                updated = await self._commit(reservation_id, {"smoobu_reservation_id": smoobu_id})
            except (SmoobuClientError, ValueError) as e:
                logger.warning(
                    "Failed to block dates in PMS",
                    reservation_id=reservation_id,
                    error=str(e),
                )
                warnings.append(BestEffortFailure("pms_block_dates", str(e)))

        await self.event_bus.publish(ReservationEventType.PAID, updated)
        return TransitionResult(updated, ReservationAction.MARK_PAID, warnings=warnings)

    async def resend_payment(self, reservation_id: str, access: Access) -> TransitionResult:
        """Send the payment link of an approved reservation again.

        The stored link is reused; a new one is created only when none is stored.

        Raises:
            Unauthorized: If ``access`` does not cover the reservation
            ReservationNotFound: If the reservation does not exist
            InvalidTransition: If the reservation is not approved
            UpstreamUnavailable: If no link is stored and none can be created
        """
        await self._authorize(access, reservation_id)
        reservation = await self._load(reservation_id)
        self._check(reservation, ReservationAction.RESEND_PAYMENT)

        warnings: list[BestEffortFailure] = []
        if not reservation.stripe_payment_link_url:
            try:
                link = await self.payment_client.create_link(reservation.deposit_amount, reservation)
            except PaymentLinkError as e:
                raise UpstreamUnavailable("payment-link provider", str(e)) from e
            reservation = await self._commit(
                reservation_id,
                {"stripe_payment_link_id": link.id, "stripe_payment_link_url": link.url},
            )

        failure = await self.notifications.reservation_approved(
            reservation, reservation.stripe_payment_link_url
        )
        if failure:
            warnings.append(failure)

        logger.info("Payment link resent", reservation_id=reservation_id)
        return TransitionResult(reservation, ReservationAction.RESEND_PAYMENT, warnings=warnings)

    async def request_transition(
        self,
        reservation_id: str,
        target_status: ReservationStatus,
        access: Access,
    ) -> TransitionResult:
        """Move a reservation to ``target_status`` through its mapped action.

        Requesting the status the reservation already has is a no-op.

        Raises:
            Unauthorized: If ``access`` does not cover the reservation
            InvalidTransition: If no action leads to ``target_status`` or it is illegal now
        """
        capability = await self._authorize(access, reservation_id)
        reservation = await self._load(reservation_id)
        if reservation.status == target_status:
            return TransitionResult(reservation, None, applied=False)

        action = TransitionTable.action_for_target(target_status)
        if action is None:
            raise InvalidTransition(reservation_id, reservation.status.value, f"move to {target_status.value}")

        if action == ReservationAction.APPROVE:
            return await self.approve(reservation_id, capability)
        if action == ReservationAction.REJECT:
            return await self.reject(reservation_id, capability)
        return await self.mark_paid(reservation_id, capability)
