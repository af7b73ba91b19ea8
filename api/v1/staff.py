"""Staff management API (admin only)"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from api.deps import get_activity_logger, require_admin
from domain.models import StaffMember
from domain.models.staff_member import StaffMemberRead, StaffMemberUpdate
from domain.services.activity_logger import ActivityLogger
from domain.services.staff_directory import StaffDirectory
from infrastructure.database import get_session

router = APIRouter()


@router.get("/", response_model=List[StaffMemberRead])
async def list_staff(
    admin: StaffMember = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    return await StaffDirectory(session, audit, admin.id).list()


@router.patch("/{member_id}", response_model=StaffMemberRead)
async def update_staff_member(
    member_id: UUID,
    changes: StaffMemberUpdate,
    admin: StaffMember = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """Change role and/or department"""
    return await StaffDirectory(session, audit, admin.id).update(member_id, changes)


@router.post("/{member_id}/toggle-active", response_model=StaffMemberRead)
async def toggle_staff_member(
    member_id: UUID,
    admin: StaffMember = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    return await StaffDirectory(session, audit, admin.id).toggle_active(member_id)
