"""In-process bus for reservation lifecycle events."""

import inspect
from typing import Any, Awaitable, Callable, Union

from structlog import get_logger

from direct_booking.models.reservation import (
    Reservation,
    ReservationEvent,
    ReservationEventType,
)

logger = get_logger(__name__)

EventHandler = Callable[[ReservationEvent], Union[None, Awaitable[Any]]]


class EventBus:
    """Routes lifecycle events to subscribed handlers.

    Several handlers may subscribe to the same event type. A failing handler
    is logged and never stops the others or the publisher.
    """

    def __init__(self):
        self._handlers: dict[ReservationEventType, list[EventHandler]] = {}

    def subscribe(self, event_type: ReservationEventType, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug("Registered event handler", event_type=event_type.value)

    def subscribe_all(self, handler: EventHandler) -> None:
        for event_type in ReservationEventType:
            self.subscribe(event_type, handler)

    async def publish(self, event_type: ReservationEventType, reservation: Reservation) -> ReservationEvent:
        """Publish an event carrying a snapshot of ``reservation``."""
        event = ReservationEvent(type=event_type, reservation=reservation.model_copy(deep=True))
        handlers = self._handlers.get(event_type, [])

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "Event handler failed",
                    event_type=event_type.value,
                    reservation_id=reservation.id,
                    error=str(e),
                    exc_info=True,
                )

        logger.debug(
            "Published reservation event",
            event_type=event_type.value,
            reservation_id=reservation.id,
            handler_count=len(handlers),
        )
        return event
