"""Shared FastAPI dependencies: auth clients, current staff member, audit trail"""
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException, Request

from domain.models import StaffMember
from domain.models.staff_member import StaffRole
from domain.services.activity_logger import ActivityLogger
from domain.services.auth_context import AuthContext
from infrastructure.database import get_session_maker
from infrastructure.supabase.auth import AuthError, SupabaseAuthClient
from infrastructure.supabase.storage import AttachmentUploader


def get_auth_client() -> SupabaseAuthClient:
    return SupabaseAuthClient()


def get_uploader() -> AttachmentUploader:
    return AttachmentUploader()


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def get_activity_logger(request: Request) -> ActivityLogger:
    """Audit logger stamped with the caller's User-Agent.

    Uses the app's background queue when the lifespan started one.
    """
    return ActivityLogger(
        user_agent=request.headers.get("user-agent"),
        queue=getattr(request.app.state, "audit_queue", None),
    )


async def get_auth_context(
    token: Optional[str] = Depends(get_bearer_token),
    auth: SupabaseAuthClient = Depends(get_auth_client),
) -> AsyncGenerator[AuthContext, None]:
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    async with AuthContext(auth, get_session_maker()) as context:
        try:
            await auth.set_session(token)
        except AuthError as e:
            raise HTTPException(status_code=401, detail=e.message)
        await context.wait_for_staff()
        yield context


async def get_current_staff(context: AuthContext = Depends(get_auth_context)) -> StaffMember:
    staff = context.staff_member
    if staff is None:
        raise HTTPException(status_code=403, detail="No staff account for this user")
    if not staff.is_active:
        raise HTTPException(status_code=403, detail="Staff account is deactivated")
    return staff


def require_roles(*roles: StaffRole):
    allowed = {role.value for role in roles}

    async def dependency(staff: StaffMember = Depends(get_current_staff)) -> StaffMember:
        if staff.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient role")
        return staff

    return dependency


require_editor = require_roles(StaffRole.ADMIN, StaffRole.STAFF)
require_admin = require_roles(StaffRole.ADMIN)
