import json
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from unittest.mock import AsyncMock, Mock

import pytest

from direct_booking.clients.stripe_client import PaymentLink
from direct_booking.models.reservation import Reservation
from direct_booking.models.reservation_status import ReservationStatus
from direct_booking.services.access_guard import AccessGuard
from direct_booking.services.events import EventBus
from direct_booking.services.operator_auth import OperatorAuthService
from direct_booking.services.reservation_state_machine import ReservationStateMachine

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SESSION_TOKEN = "operator-session-token"
OPERATOR_PASSWORD = "s3cret"


class InMemoryReservationStore:
    """Dict-backed store with the same contract as the Redis store."""

    def __init__(self):
        self.reservations: dict[str, Reservation] = {}
        self.update_calls: list[tuple[str, dict[str, Any]]] = []

    async def create(self, reservation: Reservation) -> Reservation:
        self.reservations[reservation.id] = reservation
        return reservation

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        return self.reservations.get(reservation_id)

    async def get_by_token(self, reservation_id: str, token: str) -> Optional[Reservation]:
        reservation = self.reservations.get(reservation_id)
        if reservation and reservation.token == token:
            return reservation
        return None

    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Optional[Reservation]:
        reservation = self.reservations.get(reservation_id)
        if reservation is None:
            return None
        self.update_calls.append((reservation_id, dict(changes)))
        updated = reservation.model_copy(update={**changes, "updated_at": datetime.now(timezone.utc)})
        self.reservations[reservation_id] = updated
        return updated

    async def list(
        self,
        status: Optional[ReservationStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Reservation], int]:
        items = sorted(self.reservations.values(), key=lambda r: r.created_at, reverse=True)
        if status is not None:
            items = [r for r in items if r.status == status]
        return items[offset:offset + limit], len(items)


def build_reservation(**overrides: Any) -> Reservation:
    """A 7-night, 2-guest reservation priced at the default rates."""
    arrival = overrides.pop("arrival_date", date.today() + timedelta(days=30))
    fields: dict[str, Any] = {
        "arrival_date": arrival,
        "departure_date": arrival + timedelta(days=7),
        "nights": 7,
        "guests": 2,
        "first_name": "Marie",
        "last_name": "Dupont",
        "email": "marie@example.com",
        "phone": "+33600000000",
        "nightly_rate": Decimal("120"),
        "subtotal": Decimal("840"),
        "discount": Decimal("84"),
        "discount_percent": Decimal("10"),
        "cleaning_fee": Decimal("50"),
        "tourist_tax": Decimal("40.32"),
        "total": Decimal("846.32"),
        "deposit_amount": Decimal("250"),
    }
    fields.update(overrides)
    return Reservation(**fields)


@pytest.fixture
def store():
    return InMemoryReservationStore()


@pytest.fixture
def reservation_factory(store):
    """Create a reservation directly in the store."""

    def _create(**overrides: Any) -> Reservation:
        reservation = build_reservation(**overrides)
        store.reservations[reservation.id] = reservation
        return reservation

    return _create


@pytest.fixture
def mock_payment_client():
    client = Mock()
    client.create_link = AsyncMock(
        return_value=PaymentLink(id="plink_123", url="https://buy.stripe.com/test_123")
    )
    return client


@pytest.fixture
def mock_notifications():
    notifications = Mock()
    for name in (
        "reservation_received",
        "operator_new_request",
        "reservation_approved",
        "reservation_rejected",
        "payment_confirmed",
    ):
        setattr(notifications, name, AsyncMock(return_value=None))
    return notifications


@pytest.fixture
def mock_smoobu_client():
    client = Mock()
    client.apartment_id = "12345"
    client.channel_id = 1627949
    client.check_availability = AsyncMock(return_value=True)
    client.create_reservation = AsyncMock(return_value=987654)
    client.cancel_reservation = AsyncMock(return_value=None)
    client.get_rates = AsyncMock(return_value={"data": {}})
    return client


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def state_machine(store, mock_payment_client, mock_notifications, mock_smoobu_client, event_bus, auth_service):
    return ReservationStateMachine(
        store=store,
        payment_client=mock_payment_client,
        notifications=mock_notifications,
        smoobu_client=mock_smoobu_client,
        event_bus=event_bus,
        access_guard=AccessGuard(store, auth_service),
    )


@pytest.fixture
def auth_service():
    return OperatorAuthService(password=OPERATOR_PASSWORD, session_token=SESSION_TOKEN)


@pytest.fixture
def smoobu_rates_response():
    """Load Smoobu rates response from fixture."""
    with open(FIXTURES_DIR / "smoobu" / "rates_response.json") as f:
        return json.load(f)


@pytest.fixture
def promo_catalog_path():
    return FIXTURES_DIR / "promo_codes.json"
