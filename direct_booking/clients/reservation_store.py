"""Redis-backed reservation store."""

import hmac
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

import redis.asyncio as redis
from structlog import get_logger

from direct_booking.config import settings
from direct_booking.models.reservation import Reservation
from direct_booking.models.reservation_status import ReservationStatus

logger = get_logger(__name__)


class ReservationStoreError(Exception):
    """Raised when the store cannot be read or written."""

    pass


class ReservationStore(Protocol):
    """Persistence contract used by the services."""

    async def create(self, reservation: Reservation) -> Reservation: ...

    async def get(self, reservation_id: str) -> Optional[Reservation]: ...

    async def get_by_token(self, reservation_id: str, token: str) -> Optional[Reservation]: ...

    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Optional[Reservation]: ...

    async def list(
        self,
        status: Optional[ReservationStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Reservation], int]: ...


class RedisReservationStore:
    """Persists reservations as JSON documents in Redis.

    Layout:
    - ``reservation:<id>``: reservation JSON (camelCase keys)
    - ``reservations:list``: sorted set of ids scored by creation time
    """

    RESERVATION_PREFIX = "reservation:"
    RESERVATIONS_LIST_KEY = "reservations:list"

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        """Initialize the Redis client.

        Args:
            redis_client: Existing client; one is built from settings when omitted
        """
        self.redis_client = redis_client or redis.Redis(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            password=settings.redis.password,
            ssl=settings.redis.ssl,
            decode_responses=True,
            socket_timeout=settings.redis.socket_timeout,
            socket_connect_timeout=settings.redis.socket_connect_timeout,
        )

    def _key(self, reservation_id: str) -> str:
        return f"{self.RESERVATION_PREFIX}{reservation_id}"

    async def create(self, reservation: Reservation) -> Reservation:
        """Store a new reservation and index it by creation time."""
        try:
            await self.redis_client.set(self._key(reservation.id), reservation.to_json())
            await self.redis_client.zadd(
                self.RESERVATIONS_LIST_KEY,
                {reservation.id: reservation.created_at.timestamp()},
            )
        except redis.RedisError as e:
            raise ReservationStoreError(f"Failed to store reservation: {str(e)}") from e

        logger.info("Stored reservation", reservation_id=reservation.id)
        return reservation

    async def get(self, reservation_id: str) -> Optional[Reservation]:
        """Fetch a reservation by id, or None."""
        try:
            raw = await self.redis_client.get(self._key(reservation_id))
        except redis.RedisError as e:
            raise ReservationStoreError(f"Failed to read reservation: {str(e)}") from e
        return Reservation.from_json(raw) if raw else None

    async def get_by_token(self, reservation_id: str, token: str) -> Optional[Reservation]:
        """Fetch a reservation only if ``token`` is its link token."""
        reservation = await self.get(reservation_id)
        if reservation and hmac.compare_digest(reservation.token, token):
            return reservation
        return None

    async def update(self, reservation_id: str, changes: dict[str, Any]) -> Optional[Reservation]:
        """Apply field changes in a single write.

        Args:
            reservation_id: Reservation to update
            changes: Field-name to new-value mapping

        Returns:
            Updated reservation, or None if it does not exist
        """
        reservation = await self.get(reservation_id)
        if reservation is None:
            return None

        updated = reservation.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        # Round-trip through validation so enum and decimal fields stay typed
        updated = Reservation.model_validate(updated.model_dump())
        try:
            await self.redis_client.set(self._key(reservation_id), updated.to_json())
        except redis.RedisError as e:
            raise ReservationStoreError(f"Failed to update reservation: {str(e)}") from e

        logger.debug(
            "Updated reservation",
            reservation_id=reservation_id,
            fields=sorted(changes.keys()),
        )
        return updated

    async def list(
        self,
        status: Optional[ReservationStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Reservation], int]:
        """List reservations newest first.

        Args:
            status: Optional status filter
            limit: Page size
            offset: Page start

        Returns:
            Tuple of (page of reservations, total matching count)
        """
        try:
            ids = await self.redis_client.zrange(self.RESERVATIONS_LIST_KEY, 0, -1, desc=True)
        except redis.RedisError as e:
            raise ReservationStoreError(f"Failed to list reservations: {str(e)}") from e

        reservations = []
        for reservation_id in ids:
            reservation = await self.get(reservation_id)
            if reservation is None:
                continue
            if status is not None and reservation.status != status:
                continue
            reservations.append(reservation)

        return reservations[offset:offset + limit], len(reservations)

    async def close(self) -> None:
        """Close Redis connection."""
        try:
            await self.redis_client.aclose()
            logger.debug("Closed Redis connection")
        except Exception as e:
            logger.warning("Error closing Redis connection", error=str(e))
