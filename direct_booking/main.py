"""Command-line entry point for the operator workflow."""

import argparse
import asyncio
import json
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from direct_booking.clients import (
    PromoCodeClient,
    RedisReservationStore,
    ResendEmailClient,
    SmoobuClient,
    StripePaymentLinkClient,
)
from direct_booking.config import configure_logging, get_logger, settings
from direct_booking.models import ReservationStatus
from direct_booking.services import (
    AccessGuard,
    AvailabilityLoader,
    BookingError,
    EventBus,
    FullAccess,
    NotificationService,
    PromoCodeCatalog,
    PromoCodeValidator,
    ReservationService,
    ReservationStateMachine,
    TransitionResult,
)

logger = get_logger(__name__)


def build_promo_validator() -> PromoCodeValidator:
    """Remote promo service when ``PROMO_SERVICE_URL`` is set, catalog file otherwise."""
    if settings.promo.service_url:
        return PromoCodeValidator(PromoCodeClient())
    return PromoCodeValidator(PromoCodeCatalog.from_file(Path(settings.promo.catalog_path)))


def build_state_machine(store: RedisReservationStore, event_bus: EventBus) -> ReservationStateMachine:
    return ReservationStateMachine(
        store=store,
        payment_client=StripePaymentLinkClient(),
        notifications=NotificationService(ResendEmailClient()),
        smoobu_client=SmoobuClient(),
        event_bus=event_bus,
        access_guard=AccessGuard(store),
    )


def _transition_output(result: TransitionResult) -> dict[str, Any]:
    return {
        "reservation": result.reservation.model_dump(mode="json", by_alias=True),
        "applied": result.applied,
        "warnings": [{"operation": w.operation, "error": w.error} for w in result.warnings],
    }


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Direct booking operator tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    quote = subparsers.add_parser("quote", help="Price a stay")
    quote.add_argument("--check-in", type=date.fromisoformat, required=True)
    quote.add_argument("--check-out", type=date.fromisoformat, required=True)
    quote.add_argument("--guests", type=int, default=2)
    quote.add_argument("--promo", type=str, help="Promo code to apply")

    availability = subparsers.add_parser("availability", help="Show nightly availability")
    availability.add_argument("--month", type=date.fromisoformat, default=None,
                              help="First day of the first month (default: this month)")
    availability.add_argument("--months", type=int, default=1)

    listing = subparsers.add_parser("list", help="List reservations, newest first")
    listing.add_argument("--status", type=ReservationStatus, choices=list(ReservationStatus))
    listing.add_argument("--limit", type=int, default=50)
    listing.add_argument("--offset", type=int, default=0)

    approve = subparsers.add_parser("approve", help="Approve a pending reservation")
    approve.add_argument("reservation_id")
    approve.add_argument("--deposit", type=Decimal, help="Deposit amount (default: suggested)")
    approve.add_argument("--notes", type=str)

    reject = subparsers.add_parser("reject", help="Reject a pending reservation")
    reject.add_argument("reservation_id")
    reject.add_argument("--reason", type=str)

    mark_paid = subparsers.add_parser("mark-paid", help="Record the deposit payment")
    mark_paid.add_argument("reservation_id")
    mark_paid.add_argument("--payment-intent", type=str)

    resend = subparsers.add_parser("resend-payment", help="Send the payment link again")
    resend.add_argument("reservation_id")

    return parser.parse_args(argv)


async def run_command(args: argparse.Namespace) -> dict[str, Any]:
    """Execute one CLI command and return its JSON-serializable output."""
    if args.command == "quote":
        service = ReservationService(
            store=None,
            smoobu_client=SmoobuClient(),
            notifications=NotificationService(),
            promo_validator=build_promo_validator(),
        )
        pricing, promo = await service.quote(args.check_in, args.check_out, args.guests, args.promo)
        output = {"pricing": pricing.model_dump(mode="json", by_alias=True)}
        output["pricing"]["amountDue"] = str(pricing.amount_due)
        if promo is not None:
            output["promo"] = promo.model_dump(mode="json", by_alias=True)
        return output

    if args.command == "availability":
        first_month = args.month or date.today().replace(day=1)
        index = await AvailabilityLoader(SmoobuClient()).load_months(first_month, args.months)
        return {"days": [day.model_dump(mode="json", by_alias=True) for day in index.days()]}

    store = RedisReservationStore()
    try:
        if args.command == "list":
            reservations, total = await store.list(args.status, args.limit, args.offset)
            return {
                "total": total,
                "reservations": [r.model_dump(mode="json", by_alias=True) for r in reservations],
            }

        # The CLI runs with operator rights
        operator = FullAccess()
        state_machine = build_state_machine(store, EventBus())
        if args.command == "approve":
            result = await state_machine.approve(
                args.reservation_id, operator, deposit_amount=args.deposit, admin_notes=args.notes
            )
        elif args.command == "reject":
            result = await state_machine.reject(args.reservation_id, operator, reason=args.reason)
        elif args.command == "mark-paid":
            result = await state_machine.mark_paid(
                args.reservation_id, operator, payment_intent_id=args.payment_intent
            )
        else:
            result = await state_machine.resend_payment(args.reservation_id, operator)
        return _transition_output(result)
    finally:
        await store.close()


async def main(argv: Optional[list[str]] = None) -> int:
    """Main async function.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    logger.info("Starting direct booking CLI", command=args.command, environment=settings.environment)

    try:
        output = await run_command(args)
    except BookingError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        print(json.dumps({"success": False, "error": str(e)}))
        return 1
    except Exception as e:
        logger.error("Fatal error in main application", error=str(e), exc_info=True)
        return 1

    print(json.dumps(output, indent=2, default=str))
    return 0


def run_sync(argv: Optional[list[str]] = None) -> int:
    """Run the async main function synchronously.

    Returns:
        Exit code from main()
    """
    return asyncio.run(main(argv))


if __name__ == "__main__":
    configure_logging()
    sys.exit(run_sync())
