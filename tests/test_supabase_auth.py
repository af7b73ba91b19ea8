import httpx
import pytest

from infrastructure.supabase.auth import SIGNED_IN, SIGNED_OUT, AuthError, SupabaseAuthClient
from tests.conftest import PASSWORD, SUPABASE_URL


async def test_sign_in_stores_session_and_notifies(auth_client_factory, fake_auth, staff_members):
    auth = auth_client_factory()
    events = []
    auth.on_auth_state_change(lambda event, session: events.append((event, session)))

    session = await auth.sign_in("admin@lgu.test", PASSWORD)

    assert session.user.id == staff_members["admin"].id
    assert await auth.get_session() == session
    assert events == [(SIGNED_IN, session)]
    request = fake_auth.calls[-1]
    assert request.url.params["grant_type"] == "password"
    assert request.headers["apikey"] == "anon-key"


async def test_sign_in_with_bad_password_raises_provider_message(auth_client_factory, staff_members):
    auth = auth_client_factory()

    with pytest.raises(AuthError) as exc_info:
        await auth.sign_in("admin@lgu.test", "wrong")

    assert exc_info.value.message == "Invalid login credentials"
    assert exc_info.value.status_code == 400
    assert await auth.get_session() is None


async def test_set_session_validates_token(auth_client_factory, staff_members):
    auth = auth_client_factory()

    session = await auth.set_session(f"token-{staff_members['viewer'].id}")
    assert session.user.email == "viewer@lgu.test"

    with pytest.raises(AuthError) as exc_info:
        await auth.set_session("forged")
    assert exc_info.value.status_code == 401


async def test_get_user_without_session(auth_client_factory):
    with pytest.raises(AuthError):
        await auth_client_factory().get_user()


async def test_sign_out_failure_still_clears_session(staff_members):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/v1/logout":
            return httpx.Response(500, json={"msg": "server error"})
        return httpx.Response(200, json={"id": str(staff_members["staff"].id), "email": "staff@lgu.test"})

    auth = SupabaseAuthClient(base_url=SUPABASE_URL, api_key="k", transport=httpx.MockTransport(handler))
    await auth.set_session("token")
    events = []
    auth.on_auth_state_change(lambda event, session: events.append(event))

    with pytest.raises(AuthError):
        await auth.sign_out()

    assert await auth.get_session() is None
    assert events == [SIGNED_OUT]


async def test_unreachable_provider_raises_auth_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    auth = SupabaseAuthClient(base_url=SUPABASE_URL, api_key="k", transport=httpx.MockTransport(handler))

    with pytest.raises(AuthError) as exc_info:
        await auth.sign_in("a@b.c", "pw")
    assert exc_info.value.status_code is None


async def test_unsubscribe_and_failing_listener(auth_client_factory, staff_members):
    auth = auth_client_factory()
    seen = []

    def broken(event, session):
        raise RuntimeError("listener bug")

    auth.on_auth_state_change(broken)
    unsubscribe = auth.on_auth_state_change(lambda event, session: seen.append(event))
    unsubscribe()

    await auth.sign_in("staff@lgu.test", PASSWORD)

    assert seen == []
    assert (await auth.get_session()).user.email == "staff@lgu.test"
