"""Tests for operator session liveness."""

import pytest

from direct_booking.services.admin_session import (
    COOKIE_KEY,
    LAST_ACTIVITY_KEY,
    TOKEN_KEY,
    AdminSessionContext,
    AdminSessionGuard,
    InMemorySessionStorage,
    RedisSessionStorage,
    SessionState,
)
from direct_booking.services.errors import Unauthorized

OPERATOR_PASSWORD = "s3cret"
SESSION_TOKEN = "operator-session-token"

T0 = 1_800_000_000.0
MINUTE = 60


@pytest.fixture
def storage():
    return InMemorySessionStorage()


@pytest.fixture
def session(auth_service, storage):
    return AdminSessionContext(
        auth_service,
        storage=storage,
        guard=AdminSessionGuard(timeout_seconds=600, warning_before_seconds=60),
    )


class TestAdminSessionGuard:
    """Tests for the inactivity clock."""

    def test_states_over_time(self):
        guard = AdminSessionGuard(timeout_seconds=600, warning_before_seconds=60)
        assert guard.state(T0) == SessionState.ANONYMOUS

        guard.reset(T0)

        assert guard.state(T0 + 8 * MINUTE) == SessionState.ACTIVE
        assert guard.state(T0 + 9 * MINUTE) == SessionState.WARNING
        assert guard.state(T0 + 10 * MINUTE) == SessionState.EXPIRED
        assert guard.seconds_remaining(T0 + 9 * MINUTE) == 60


class TestAdminSessionContext:
    """Tests for AdminSessionContext."""

    @pytest.mark.asyncio
    async def test_login_persists_token_and_cookie(self, session, storage):
        token = await session.login(OPERATOR_PASSWORD, now=T0)

        assert token == SESSION_TOKEN
        assert await storage.get(TOKEN_KEY) == SESSION_TOKEN
        assert await storage.get(COOKIE_KEY) == SESSION_TOKEN
        assert float(await storage.get(LAST_ACTIVITY_KEY)) == T0

    @pytest.mark.asyncio
    async def test_wrong_password(self, session):
        with pytest.raises(Unauthorized):
            await session.login("wrong", now=T0)
        assert not session.is_authenticated

    @pytest.mark.asyncio
    async def test_idle_nine_minutes_shows_warning_and_keydown_clears_it(self, session):
        await session.login(OPERATOR_PASSWORD, now=T0)

        assert await session.tick(T0 + 9 * MINUTE) == SessionState.WARNING
        assert session.show_warning(T0 + 9 * MINUTE)

        state = await session.record_activity("keydown", T0 + 9 * MINUTE)

        assert state == SessionState.ACTIVE
        assert not session.show_warning(T0 + 9 * MINUTE)
        # A fresh ten-minute window starts at minute 9
        assert await session.tick(T0 + 18 * MINUTE) == SessionState.WARNING
        assert await session.tick(T0 + 18 * MINUTE + 59) == SessionState.WARNING
        assert session.is_authenticated

    @pytest.mark.asyncio
    async def test_untracked_events_do_not_extend(self, session):
        await session.login(OPERATOR_PASSWORD, now=T0)

        await session.record_activity("mousemove", T0 + 5 * MINUTE)

        assert await session.tick(T0 + 9 * MINUTE) == SessionState.WARNING

    @pytest.mark.asyncio
    async def test_timeout_tears_down(self, session, storage):
        await session.login(OPERATOR_PASSWORD, now=T0)

        state = await session.tick(T0 + 10 * MINUTE)

        assert state == SessionState.EXPIRED
        assert not session.is_authenticated
        assert await storage.get(TOKEN_KEY) is None
        assert await storage.get(COOKIE_KEY) is None

    @pytest.mark.asyncio
    async def test_extend(self, session):
        await session.login(OPERATOR_PASSWORD, now=T0)

        await session.extend(T0 + 9 * MINUTE + 30)

        assert await session.tick(T0 + 15 * MINUTE) == SessionState.ACTIVE

    @pytest.mark.asyncio
    async def test_reload_after_expiry_forces_logout(self, auth_service, storage, session):
        await session.login(OPERATOR_PASSWORD, now=T0)

        reloaded = AdminSessionContext(
            auth_service,
            storage=storage,
            guard=AdminSessionGuard(timeout_seconds=600, warning_before_seconds=60),
        )
        state = await reloaded.init(now=T0 + 11 * MINUTE)

        assert state == SessionState.EXPIRED
        assert not reloaded.is_authenticated
        assert await storage.get(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_reload_within_window_restores_session(self, auth_service, storage, session):
        await session.login(OPERATOR_PASSWORD, now=T0)

        reloaded = AdminSessionContext(
            auth_service,
            storage=storage,
            guard=AdminSessionGuard(timeout_seconds=600, warning_before_seconds=60),
        )
        state = await reloaded.init(now=T0 + 2 * MINUTE)

        assert state == SessionState.ACTIVE
        assert reloaded.token == SESSION_TOKEN

    @pytest.mark.asyncio
    async def test_stale_token_is_cleared_on_init(self, session, storage):
        await storage.set(TOKEN_KEY, "rotated-away")

        assert await session.init(now=T0) == SessionState.ANONYMOUS
        assert await storage.get(TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_logout(self, session, storage):
        await session.login(OPERATOR_PASSWORD, now=T0)

        await session.logout()

        assert not session.is_authenticated
        assert await storage.get(LAST_ACTIVITY_KEY) is None


class FakeRedis:
    """Just enough of redis.asyncio.Redis for session storage."""

    def __init__(self):
        self.values: dict[str, str] = {}

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value):
        self.values[key] = value

    async def delete(self, key):
        self.values.pop(key, None)


class TestRedisSessionStorage:
    """Tests for RedisSessionStorage."""

    @pytest.mark.asyncio
    async def test_keys_are_namespaced_per_session(self):
        client = FakeRedis()
        first = RedisSessionStorage("browser-1", redis_client=client)
        second = RedisSessionStorage("browser-2", redis_client=client)

        await first.set(TOKEN_KEY, "abc")

        assert client.values == {"admin:session:browser-1:adminToken": "abc"}
        assert await first.get(TOKEN_KEY) == "abc"
        assert await second.get(TOKEN_KEY) is None

        await first.delete(TOKEN_KEY)
        assert client.values == {}

    @pytest.mark.asyncio
    async def test_session_survives_a_new_context(self, auth_service):
        client = FakeRedis()
        guard = AdminSessionGuard(timeout_seconds=600, warning_before_seconds=60)
        first = AdminSessionContext(auth_service, RedisSessionStorage("browser-1", client), guard)
        await first.login(OPERATOR_PASSWORD, now=T0)

        restored = AdminSessionContext(
            auth_service,
            RedisSessionStorage("browser-1", client),
            AdminSessionGuard(timeout_seconds=600, warning_before_seconds=60),
        )
        state = await restored.init(now=T0 + 2 * MINUTE)

        assert state == SessionState.ACTIVE
        assert restored.token == SESSION_TOKEN


class TestAdminSessionGuardConfiguration:
    def test_zero_timeouts_are_not_replaced_by_defaults(self):
        guard = AdminSessionGuard(timeout_seconds=0, warning_before_seconds=0)

        assert guard.timeout_seconds == 0
        assert guard.warning_before_seconds == 0
        guard.reset(now=T0)
        assert guard.state(now=T0) == SessionState.EXPIRED
