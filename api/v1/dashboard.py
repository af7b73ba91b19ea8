"""Dashboard API - menu and overview counters"""
from typing import List

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from api.deps import get_activity_logger, get_current_staff
from domain.models import StaffMember
from domain.navigation import MenuItem, visible_sections
from domain.services.activity_logger import Actions, ActivityLogger
from domain.services.overview import OverviewStats, get_overview
from infrastructure.database import get_session

router = APIRouter()


@router.get("/menu", response_model=List[MenuItem])
async def get_menu(
    staff: StaffMember = Depends(get_current_staff),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """Sections the current staff member may open"""
    await audit.log(staff.id, Actions.DASHBOARD_ACCESS)
    return visible_sections(staff.role)


@router.get("/overview", response_model=OverviewStats)
async def overview(
    staff: StaffMember = Depends(get_current_staff),
    session: AsyncSession = Depends(get_session),
):
    return await get_overview(session)
