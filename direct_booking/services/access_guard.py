"""Resolution of the two authorization paths onto a reservation."""

from dataclasses import dataclass
from typing import Optional, Union

from structlog import get_logger

from direct_booking.clients.reservation_store import ReservationStore
from direct_booking.services.errors import Unauthorized
from direct_booking.services.operator_auth import OperatorAuthService

logger = get_logger(__name__)


@dataclass(frozen=True)
class AccessRequest:
    """Credentials carried by an incoming call.

    ``link_token`` comes from the ``?token=`` query parameter, ``bearer_token``
    from the ``Authorization`` header and ``cookie_token`` from the operator
    session cookie.
    """

    link_token: Optional[str] = None
    bearer_token: Optional[str] = None
    cookie_token: Optional[str] = None

    @classmethod
    def from_headers(
        cls,
        query: dict[str, str],
        headers: dict[str, str],
        cookies: dict[str, str],
        cookie_name: str = "adminToken",
    ) -> "AccessRequest":
        """Extract credentials from a request's query string, headers and cookies.

        Args:
            query: Query parameters (``token`` is the link token)
            headers: Request headers (``Authorization: Bearer <token>``)
            cookies: Request cookies
            cookie_name: Name of the operator session cookie

        Returns:
            AccessRequest with empty values normalized to None
        """
        auth = headers.get("Authorization") or headers.get("authorization") or ""
        bearer = auth[len("Bearer "):] if auth.startswith("Bearer ") else None
        return cls(
            link_token=query.get("token") or None,
            bearer_token=bearer or None,
            cookie_token=cookies.get(cookie_name) or None,
        )


@dataclass(frozen=True)
class SingleReservationAccess:
    """Link-token rights over exactly one reservation."""

    reservation_id: str

    def permits(self, reservation_id: str) -> bool:
        """True only for the reservation the link token was issued for."""
        return reservation_id == self.reservation_id

    @property
    def can_list(self) -> bool:
        return False


@dataclass(frozen=True)
class FullAccess:
    """Operator session rights over every reservation.

    Also passed explicitly by trusted in-process callers: the signed payment
    webhook and the operator CLI.
    """

    def permits(self, reservation_id: str) -> bool:
        return True

    @property
    def can_list(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    """No valid credential; the caller should be shown the operator login."""

    def permits(self, reservation_id: str) -> bool:
        return False

    @property
    def can_list(self) -> bool:
        return False


Capability = Union[SingleReservationAccess, FullAccess, Denied]

Access = Union[AccessRequest, SingleReservationAccess, FullAccess, Denied]


class AccessGuard:
    """Decides which path, if any, authorizes a call."""

    def __init__(self, store: ReservationStore, auth_service: Optional[OperatorAuthService] = None):
        self.store = store
        self.auth_service = auth_service or OperatorAuthService()

    def _session_capability(self, request: AccessRequest) -> Capability:
        """FullAccess if the bearer header or the session cookie verifies."""
        for token in (request.bearer_token, request.cookie_token):
            if self.auth_service.verify(token):
                return FullAccess()
        return Denied()

    async def resolve_access(
        self,
        request: AccessRequest,
        reservation_id: Optional[str] = None,
    ) -> Capability:
        """Resolve the capability of a request.

        A link token matching the reservation's stored token wins without
        consulting the session. A non-matching link token is ignored and the
        session path is tried instead.

        Args:
            request: Incoming credentials
            reservation_id: Reservation targeted by the call; None for listing

        Returns:
            SingleReservationAccess, FullAccess or Denied
        """
        if request.link_token and reservation_id:
            reservation = await self.store.get_by_token(reservation_id, request.link_token)
            if reservation is not None:
                logger.debug("Access granted by link token", reservation_id=reservation_id)
                return SingleReservationAccess(reservation_id)
            logger.info("Link token did not match, trying session", reservation_id=reservation_id)

        capability = self._session_capability(request)
        if isinstance(capability, Denied):
            logger.info("Access denied", reservation_id=reservation_id)
        return capability

    async def require(self, request: AccessRequest, reservation_id: str) -> Capability:
        """Resolve access for ``reservation_id`` or raise.

        Raises:
            Unauthorized: If the resolved capability does not cover the reservation
        """
        capability = await self.resolve_access(request, reservation_id)
        if not capability.permits(reservation_id):
            raise Unauthorized(f"Not authorized for reservation {reservation_id}")
        return capability

    async def authorize(self, access: Access, reservation_id: str) -> Capability:
        """Check the credentials of a call that mutates ``reservation_id``.

        Args:
            access: Raw request credentials, or a capability already resolved
                for this call
            reservation_id: Reservation the call mutates

        Returns:
            The capability covering the reservation

        Raises:
            Unauthorized: If the credentials do not cover the reservation
        """
        if isinstance(access, AccessRequest):
            return await self.require(access, reservation_id)
        if not access.permits(reservation_id):
            logger.warning(
                "Capability does not cover reservation",
                reservation_id=reservation_id,
                capability=type(access).__name__,
            )
            raise Unauthorized(f"Not authorized for reservation {reservation_id}")
        return access

    async def require_listing(self, request: AccessRequest) -> Capability:
        """Only an operator session may list reservations.

        Raises:
            Unauthorized: For link-token or anonymous callers
        """
        capability = self._session_capability(request)
        if not capability.can_list:
            raise Unauthorized("Operator session required")
        return capability
