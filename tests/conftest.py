import json
from uuid import UUID, uuid4

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import select

from domain.models import ActivityLog, StaffMember
from domain.services.activity_logger import ActivityLogger
from infrastructure.database import connection, init_db
from infrastructure.supabase.auth import SupabaseAuthClient

SUPABASE_URL = "http://supabase.test"
PASSWORD = "correct-horse"


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    connection.set_engine(engine)
    await init_db(max_retries=1)
    yield engine
    await connection.dispose_engine()


@pytest.fixture
def session_maker(engine):
    return connection.get_session_maker()


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def staff_members(session_maker):
    """One active member per role plus a deactivated staff account"""
    members = {
        "admin": StaffMember(id=uuid4(), email="admin@lgu.test", full_name="Ada Admin", role="admin", department="City Admin Office"),
        "staff": StaffMember(id=uuid4(), email="staff@lgu.test", full_name="Sam Staff", role="staff", department="Legal Affairs"),
        "viewer": StaffMember(id=uuid4(), email="viewer@lgu.test", full_name="Vic Viewer", role="viewer", department="Tourism Office"),
        "inactive": StaffMember(id=uuid4(), email="gone@lgu.test", full_name="Gus Gone", role="staff", department="Human Resources", is_active=False),
    }
    async with session_maker() as session:
        for member in members.values():
            session.add(member)
        await session.commit()
    return members


@pytest.fixture
def audit(session_maker):
    return ActivityLogger(session_maker, user_agent="pytest-agent")


def _unavailable_store():
    raise ConnectionError("store unavailable")


@pytest.fixture
def broken_audit():
    """Audit logger whose store is down"""
    return ActivityLogger(session_maker=_unavailable_store)


async def fetch_logs(session_maker, **filters):
    query = select(ActivityLog).order_by(ActivityLog.created_at)
    for field, value in filters.items():
        query = query.where(getattr(ActivityLog, field) == value)
    async with session_maker() as session:
        result = await session.execute(query)
        return list(result.scalars().all())


class FakeSupabaseAuth:
    """Stands in for the Supabase auth REST API behind httpx.MockTransport"""

    def __init__(self):
        self.users = {}  # email -> UUID
        self.tokens = {}  # access token -> (UUID, email)
        self.calls = []

    def add_user(self, email: str, user_id: UUID) -> str:
        token = f"token-{user_id}"
        self.users[email] = user_id
        self.tokens[token] = (user_id, email)
        return token

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path

        if path == "/auth/v1/token":
            body = json.loads(request.content)
            user_id = self.users.get(body["email"])
            if user_id is None or body["password"] != PASSWORD:
                return httpx.Response(
                    400,
                    json={"error": "invalid_grant", "error_description": "Invalid login credentials"},
                )
            return httpx.Response(
                200,
                json={
                    "access_token": f"token-{user_id}",
                    "refresh_token": "refresh",
                    "expires_at": 1893456000,
                    "token_type": "bearer",
                    "user": {"id": str(user_id), "email": body["email"]},
                },
            )

        if path == "/auth/v1/user":
            token = request.headers.get("authorization", "").removeprefix("Bearer ")
            if token not in self.tokens:
                return httpx.Response(401, json={"msg": "invalid JWT"})
            user_id, email = self.tokens[token]
            return httpx.Response(200, json={"id": str(user_id), "email": email})

        if path == "/auth/v1/logout":
            return httpx.Response(204)

        return httpx.Response(404, json={"msg": "not found"})


@pytest.fixture
def fake_auth(staff_members):
    fake = FakeSupabaseAuth()
    for member in staff_members.values():
        fake.add_user(member.email, member.id)
    return fake


@pytest.fixture
def auth_client_factory(fake_auth):
    def factory() -> SupabaseAuthClient:
        return SupabaseAuthClient(
            base_url=SUPABASE_URL,
            api_key="anon-key",
            transport=httpx.MockTransport(fake_auth),
        )

    return factory
