"""
Unit tests for AuthSession.
"""
import pytest

from referralhub.core.exceptions import UnauthorizedException, ValidationError
from referralhub.models.user import UserRole
from referralhub.services.session import AuthSession


@pytest.fixture
def session(auth_provider, profiles):
    return AuthSession(auth_provider, profiles)


class TestSessionLifecycle:

    @pytest.mark.asyncio
    async def test_listener_called_immediately(self, session):
        seen = []
        await session.start(seen.append)
        assert seen == [None]

    @pytest.mark.asyncio
    async def test_listener_follows_sign_in_and_out(self, session):
        seen = []
        await session.start(seen.append)

        profile = await session.sign_up("jane@college.edu", "secret123", "student", {"major": "CS"})
        assert profile.user_type == UserRole.STUDENT
        assert session.is_authenticated

        await session.sign_out()
        assert not session.is_authenticated
        assert session.current_profile is None

        assert [identity.uid if identity else None for identity in seen] == [None, profile.uid, None]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, session):
        seen = []
        unsubscribe = await session.start(seen.append)
        unsubscribe()

        await session.sign_up("jane@college.edu", "secret123", "student")
        assert seen == [None]

    @pytest.mark.asyncio
    async def test_async_listener(self, session):
        seen = []

        async def listener(identity):
            seen.append(identity)

        await session.start(listener)
        await session.sign_up("jane@college.edu", "secret123", "professional")
        assert len(seen) == 2

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_sign_in(self, session):
        def listener(identity):
            raise RuntimeError("boom")

        await session.start(listener)
        profile = await session.sign_up("jane@college.edu", "secret123", "student")
        assert profile is not None

    @pytest.mark.asyncio
    async def test_stop_clears_state(self, session):
        seen = []
        await session.start(seen.append)
        await session.sign_up("jane@college.edu", "secret123", "student")

        session.stop()

        assert session.current_user is None
        await session.sign_in("jane@college.edu", "secret123")
        assert len(seen) == 2


class TestSessionAuth:

    @pytest.mark.asyncio
    async def test_sign_in_loads_profile(self, session, events):
        created = await session.sign_up("jane@college.edu", "secret123", "student")
        await session.sign_out()

        profile = await session.sign_in("Jane@College.edu", "secret123")

        assert profile.uid == created.uid
        assert len(events("login_success")) == 1

    @pytest.mark.asyncio
    async def test_wrong_password(self, session, events):
        await session.sign_up("jane@college.edu", "secret123", "student")

        with pytest.raises(UnauthorizedException):
            await session.sign_in("jane@college.edu", "wrong-password")
        assert len(events("login_error")) == 1

    @pytest.mark.asyncio
    async def test_invalid_user_type(self, session):
        with pytest.raises(ValidationError):
            await session.sign_up("jane@college.edu", "secret123", "admin")

    @pytest.mark.asyncio
    async def test_duplicate_email(self, session):
        await session.sign_up("jane@college.edu", "secret123", "student")
        with pytest.raises(ValidationError):
            await session.sign_up("jane@college.edu", "secret123", "student")

    @pytest.mark.asyncio
    async def test_reset_password(self, session, auth_provider):
        await session.reset_password("jane@college.edu")
        assert auth_provider.reset_requests == ["jane@college.edu"]

    @pytest.mark.asyncio
    async def test_sign_out_revokes_token(self, session, auth_provider):
        await session.sign_up("jane@college.edu", "secret123", "student")
        token = session.current_user.id_token

        await session.sign_out()

        with pytest.raises(UnauthorizedException):
            await auth_provider.verify_token(token)
