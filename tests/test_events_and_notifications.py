"""Tests for the event bus and notification emails."""

from unittest.mock import AsyncMock, Mock

import pytest

from direct_booking.clients.email_client import EmailClientError
from direct_booking.models.reservation import ReservationEventType
from direct_booking.services.events import EventBus
from direct_booking.services.notifications import NotificationService


class TestEventBus:
    """Tests for EventBus."""

    @pytest.mark.asyncio
    async def test_sync_and_async_handlers(self, reservation_factory):
        bus = EventBus()
        sync_handler = Mock()
        async_handler = AsyncMock()
        bus.subscribe(ReservationEventType.APPROVED, sync_handler)
        bus.subscribe(ReservationEventType.APPROVED, async_handler)

        event = await bus.publish(ReservationEventType.APPROVED, reservation_factory())

        sync_handler.assert_called_once_with(event)
        async_handler.assert_awaited_once_with(event)

    @pytest.mark.asyncio
    async def test_only_matching_type(self, reservation_factory):
        bus = EventBus()
        handler = Mock()
        bus.subscribe(ReservationEventType.PAID, handler)

        await bus.publish(ReservationEventType.CREATED, reservation_factory())

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, reservation_factory):
        bus = EventBus()
        failing = Mock(side_effect=RuntimeError("boom"))
        after = Mock()
        bus.subscribe(ReservationEventType.REJECTED, failing)
        bus.subscribe(ReservationEventType.REJECTED, after)

        await bus.publish(ReservationEventType.REJECTED, reservation_factory())

        after.assert_called_once()

    @pytest.mark.asyncio
    async def test_event_carries_snapshot(self, reservation_factory):
        bus = EventBus()
        reservation = reservation_factory()

        event = await bus.publish(ReservationEventType.CREATED, reservation)

        assert event.reservation == reservation
        assert event.reservation is not reservation

    @pytest.mark.asyncio
    async def test_subscribe_all(self, reservation_factory):
        bus = EventBus()
        handler = Mock()
        bus.subscribe_all(handler)

        for event_type in ReservationEventType:
            await bus.publish(event_type, reservation_factory())

        assert handler.call_count == len(ReservationEventType)


@pytest.fixture
def email_client():
    client = Mock()
    client.send = AsyncMock(return_value={"id": "email_1"})
    return client


class TestNotificationService:
    """Tests for NotificationService."""

    @pytest.mark.asyncio
    async def test_guest_email(self, email_client, reservation_factory):
        reservation = reservation_factory()

        failure = await NotificationService(email_client).reservation_received(reservation)

        assert failure is None
        kwargs = email_client.send.call_args.kwargs
        assert kwargs["to"] == ["marie@example.com"]
        assert "Bonjour Marie" in kwargs["text"]

    @pytest.mark.asyncio
    async def test_english_locale(self, email_client, reservation_factory):
        await NotificationService(email_client).reservation_received(reservation_factory(locale="en"))

        assert "Hello Marie" in email_client.send.call_args.kwargs["text"]

    @pytest.mark.asyncio
    async def test_operator_email_has_action_link(self, email_client, reservation_factory):
        reservation = reservation_factory()
        service = NotificationService(email_client)

        await service.operator_new_request(reservation)

        kwargs = email_client.send.call_args.kwargs
        assert kwargs["to"] == list(service.admin_emails)
        assert f"/r/{reservation.id}?token={reservation.token}" in kwargs["text"]

    @pytest.mark.asyncio
    async def test_approved_email_has_payment_link(self, email_client, reservation_factory):
        await NotificationService(email_client).reservation_approved(
            reservation_factory(), "https://buy.stripe.com/test_123"
        )

        assert "https://buy.stripe.com/test_123" in email_client.send.call_args.kwargs["text"]

    @pytest.mark.asyncio
    async def test_rejected_default_reason(self, email_client, reservation_factory):
        await NotificationService(email_client).reservation_rejected(reservation_factory(locale="en"))

        assert "no longer available" in email_client.send.call_args.kwargs["text"]

    @pytest.mark.asyncio
    async def test_failure_is_returned(self, email_client, reservation_factory):
        email_client.send.side_effect = EmailClientError("Resend API error: 500")

        failure = await NotificationService(email_client).payment_confirmed(reservation_factory())

        assert failure.operation == "email_payment_confirmed"
        assert "500" in failure.error
