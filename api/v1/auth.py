"""Staff authentication API"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.deps import get_activity_logger, get_auth_client, get_auth_context
from domain.models.staff_member import StaffMemberRead
from domain.models.timestamps import utc_now
from domain.navigation import MenuItem, visible_sections
from domain.services.activity_logger import Actions, ActivityLogger
from domain.services.auth_context import AuthContext
from infrastructure.supabase.auth import AuthError, SupabaseAuthClient

router = APIRouter()


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    user_id: UUID
    email: Optional[str] = None


class MeResponse(BaseModel):
    user_id: UUID
    email: Optional[str] = None
    staff_member: Optional[StaffMemberRead] = None
    menu: List[MenuItem]


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    auth: SupabaseAuthClient = Depends(get_auth_client),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """Password sign-in. The login audit entry never blocks the response."""
    try:
        session = await auth.sign_in(body.email, body.password)
    except AuthError as e:
        status_code = 401 if e.status_code and e.status_code < 500 else 503
        raise HTTPException(status_code=status_code, detail=e.message)

    await audit.log(
        session.user.id,
        Actions.LOGIN,
        "auth",
        None,
        {"email": body.email, "login_time": utc_now().isoformat()},
    )

    return LoginResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_at=session.expires_at,
        user_id=session.user.id,
        email=session.user.email,
    )


@router.post("/logout", status_code=204)
async def logout(
    context: AuthContext = Depends(get_auth_context),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    # Logged before signing out, while the user is still known
    if context.user is not None:
        await audit.log(
            context.user.id,
            Actions.LOGOUT,
            "auth",
            None,
            {"logout_time": utc_now().isoformat()},
        )
    await context.logout()
    return None


@router.get("/me", response_model=MeResponse)
async def me(context: AuthContext = Depends(get_auth_context)):
    staff = context.staff_member
    return MeResponse(
        user_id=context.user.id,
        email=context.user.email,
        staff_member=StaffMemberRead.model_validate(staff) if staff else None,
        menu=visible_sections(context.role),
    )
