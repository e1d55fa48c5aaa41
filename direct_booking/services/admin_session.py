"""Operator session liveness: inactivity timeout, warning and extension."""

import time
from enum import Enum
from typing import Callable, Optional, Protocol

import redis.asyncio as redis
from structlog import get_logger

from direct_booking.config import settings
from direct_booking.services.operator_auth import OperatorAuthService

logger = get_logger(__name__)

TRACKED_EVENTS = frozenset({"pointerdown", "keydown", "scroll", "touchstart"})

TOKEN_KEY = "adminToken"
COOKIE_KEY = "cookie:adminToken"
LAST_ACTIVITY_KEY = "adminLastActivity"


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    ACTIVE = "active"
    WARNING = "warning"
    EXPIRED = "expired"


class SessionStorage(Protocol):
    """Key-value storage that survives a page reload."""

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemorySessionStorage:
    """Process-local session storage."""

    def __init__(self):
        self._values: dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    async def set(self, key: str, value: str) -> None:
        self._values[key] = value

    async def delete(self, key: str) -> None:
        self._values.pop(key, None)


class RedisSessionStorage:
    """Session storage shared across processes, namespaced per browser session."""

    KEY_PREFIX = "admin:session:"

    def __init__(self, session_id: str, redis_client: Optional[redis.Redis] = None):
        self.session_id = session_id
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

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{self.session_id}:{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self.redis_client.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        await self.redis_client.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self.redis_client.delete(self._key(key))


class AdminSessionGuard:
    """Inactivity clock.

    The session expires ``timeout_seconds`` after the last activity and is in
    the warning window during the final ``warning_before_seconds``.
    """

    def __init__(
        self,
        timeout_seconds: Optional[int] = None,
        warning_before_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        if timeout_seconds is None:
            timeout_seconds = settings.admin.inactivity_timeout_seconds
        if warning_before_seconds is None:
            warning_before_seconds = settings.admin.warning_before_seconds
        self.timeout_seconds = timeout_seconds
        self.warning_before_seconds = warning_before_seconds
        self.clock = clock
        self.last_activity: Optional[float] = None

    def reset(self, now: Optional[float] = None) -> float:
        """Restart the inactivity window.

        Args:
            now: Activity time in epoch seconds; the clock is read when omitted

        Returns:
            The new last-activity time
        """
        self.last_activity = self.clock() if now is None else now
        return self.last_activity

    def expires_at(self) -> Optional[float]:
        """Epoch seconds at which the session times out, or None when anonymous."""
        if self.last_activity is None:
            return None
        return self.last_activity + self.timeout_seconds

    def state(self, now: Optional[float] = None) -> SessionState:
        """Classify the session at ``now``.

        Args:
            now: Time to evaluate at; the clock is read when omitted

        Returns:
            ANONYMOUS before any activity, then ACTIVE, WARNING or EXPIRED
        """
        if self.last_activity is None:
            return SessionState.ANONYMOUS
        now = self.clock() if now is None else now
        idle = now - self.last_activity
        if idle >= self.timeout_seconds:
            return SessionState.EXPIRED
        if idle >= self.timeout_seconds - self.warning_before_seconds:
            return SessionState.WARNING
        return SessionState.ACTIVE

    def seconds_remaining(self, now: Optional[float] = None) -> float:
        """Seconds until timeout, floored at 0; the countdown shown in the warning."""
        expires_at = self.expires_at()
        if expires_at is None:
            return 0.0
        now = self.clock() if now is None else now
        return max(0.0, expires_at - now)


class AdminSessionContext:
    """Explicit operator session: token, cookie and inactivity clock.

    ``init`` restores a session on load (forcing logout when the persisted
    last activity is already too old); ``teardown`` clears the token and the
    cookie.
    """

    def __init__(
        self,
        auth_service: OperatorAuthService,
        storage: Optional[SessionStorage] = None,
        guard: Optional[AdminSessionGuard] = None,
    ):
        self.auth_service = auth_service
        self.storage = storage or InMemorySessionStorage()
        self.guard = guard or AdminSessionGuard()
        self.token: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    async def init(self, now: Optional[float] = None) -> SessionState:
        """Restore the session from storage."""
        stored_token = await self.storage.get(TOKEN_KEY)
        if not stored_token:
            return SessionState.ANONYMOUS

        if not self.auth_service.verify(stored_token):
            logger.info("Stored operator token rejected, clearing session")
            await self.teardown()
            return SessionState.ANONYMOUS

        raw_last_activity = await self.storage.get(LAST_ACTIVITY_KEY)
        if raw_last_activity is not None:
            self.guard.last_activity = float(raw_last_activity)
            if self.guard.state(now) == SessionState.EXPIRED:
                logger.info("Operator session expired while away, forcing logout")
                await self.teardown()
                return SessionState.EXPIRED
        else:
            self.guard.reset(now)
            await self._persist_activity()

        self.token = stored_token
        return self.guard.state(now)

    async def login(self, password: str, now: Optional[float] = None) -> str:
        """Log in and start a fresh inactivity window.

        Raises:
            Unauthorized: On a wrong password
        """
        token = self.auth_service.login(password)
        self.token = token
        await self.storage.set(TOKEN_KEY, token)
        await self.storage.set(COOKIE_KEY, token)
        self.guard.reset(now)
        await self._persist_activity()
        return token

    async def _persist_activity(self) -> None:
        await self.storage.set(LAST_ACTIVITY_KEY, repr(self.guard.last_activity))

    async def record_activity(self, event_type: str, now: Optional[float] = None) -> SessionState:
        """Register a UI event; tracked events restart the inactivity window."""
        if not self.is_authenticated:
            return SessionState.ANONYMOUS
        if event_type not in TRACKED_EVENTS:
            return await self.tick(now)
        if self.guard.state(now) == SessionState.EXPIRED:
            await self.teardown()
            return SessionState.EXPIRED
        self.guard.reset(now)
        await self._persist_activity()
        return SessionState.ACTIVE

    async def extend(self, now: Optional[float] = None) -> SessionState:
        """Explicit "stay connected"."""
        return await self.record_activity("keydown", now)

    async def tick(self, now: Optional[float] = None) -> SessionState:
        """Evaluate the clock; logs the operator out once the window has passed."""
        if not self.is_authenticated:
            return SessionState.ANONYMOUS
        state = self.guard.state(now)
        if state == SessionState.EXPIRED:
            logger.info("Operator session timed out")
            await self.teardown()
        return state

    def show_warning(self, now: Optional[float] = None) -> bool:
        """Whether the "session about to expire" prompt should be visible.

        Returns:
            True only for an authenticated session inside the warning window
        """
        return self.is_authenticated and self.guard.state(now) == SessionState.WARNING

    async def logout(self) -> None:
        """Explicit operator logout."""
        logger.info("Operator logged out")
        await self.teardown()

    async def teardown(self) -> None:
        """Forget the token, the cookie and the inactivity clock, in memory and in storage."""
        self.token = None
        self.guard.last_activity = None
        await self.storage.delete(TOKEN_KEY)
        await self.storage.delete(COOKIE_KEY)
        await self.storage.delete(LAST_ACTIVITY_KEY)
