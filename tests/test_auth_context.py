import asyncio
from unittest.mock import AsyncMock
from uuid import uuid4

from domain.services.auth_context import AuthContext
from infrastructure.supabase.auth import SIGNED_IN, AuthError, AuthSession, AuthUser
from tests.conftest import PASSWORD


async def test_start_without_session_is_logged_out(auth_client_factory, session_maker):
    context = await AuthContext(auth_client_factory(), session_maker).start()

    assert context.is_loading is False
    assert context.is_logged_in is False
    assert context.user is None
    assert context.role is None
    await context.close()


async def test_existing_session_logs_in_before_staff_resolves(auth_client_factory, session_maker, staff_members):
    auth = auth_client_factory()
    await auth.sign_in("staff@lgu.test", PASSWORD)

    context = await AuthContext(auth, session_maker).start()

    assert context.is_logged_in is True
    assert context.user.id == staff_members["staff"].id
    assert context.role is None  # lookup still pending

    await context.wait_for_staff()
    assert context.role == "staff"
    assert context.staff_member.department == "Legal Affairs"
    await context.close()


async def test_auth_events_drive_state(auth_client_factory, session_maker, staff_members):
    auth = auth_client_factory()
    async with AuthContext(auth, session_maker) as context:
        await auth.sign_in("admin@lgu.test", PASSWORD)
        await context.wait_for_staff()
        assert context.role == "admin"

        await auth.sign_out()
        assert context.is_logged_in is False
        assert context.staff_member is None


async def test_only_latest_session_is_resolved(auth_client_factory, session_maker, staff_members):
    auth = auth_client_factory()
    async with AuthContext(auth, session_maker) as context:
        await auth.sign_in("viewer@lgu.test", PASSWORD)
        await auth.sign_in("admin@lgu.test", PASSWORD)

        await context.wait_for_staff()
        await asyncio.sleep(0)

        assert context.user.id == staff_members["admin"].id
        assert context.role == "admin"


async def test_unknown_user_stays_without_role(session_maker, staff_members):
    auth = AsyncMock()
    auth.on_auth_state_change = lambda callback: (lambda: None)
    auth.get_session.return_value = None

    async with AuthContext(auth, session_maker) as context:
        context._on_auth_state_change(
            SIGNED_IN, AuthSession(access_token="t", user=AuthUser(id=uuid4(), email="x@y.z"))
        )
        assert context.is_logged_in is True
        assert await context.wait_for_staff() is None
        assert context.role is None


async def test_logout_clears_state_even_if_provider_fails(auth_client_factory, session_maker, staff_members):
    auth = auth_client_factory()
    await auth.sign_in("staff@lgu.test", PASSWORD)
    context = await AuthContext(auth, session_maker).start()
    await context.wait_for_staff()

    auth.sign_out = AsyncMock(side_effect=AuthError("network down"))
    await context.logout()

    auth.sign_out.assert_awaited_once()
    assert context.is_logged_in is False
    assert context.user is None
    assert context.staff_member is None
    await context.close()


async def test_close_unsubscribes(auth_client_factory, session_maker, staff_members):
    auth = auth_client_factory()
    context = await AuthContext(auth, session_maker).start()
    await context.close()

    await auth.sign_in("staff@lgu.test", PASSWORD)

    assert context.is_logged_in is False


async def test_provider_error_on_start_leaves_context_usable(session_maker):
    auth = AsyncMock()
    auth.on_auth_state_change = lambda callback: (lambda: None)
    auth.get_session.side_effect = AuthError("unreachable")

    context = await AuthContext(auth, session_maker).start()

    assert context.is_loading is False
    assert context.is_logged_in is False
