"""Activity logs API.

Admins read everyone's trail, staff read their own, viewers get nothing.
An empty list means "no data or the store was unreachable".
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_activity_logger, get_current_staff
from config import settings
from domain.models import StaffMember
from domain.models.activity_log import ActivityLogRead
from domain.models.staff_member import StaffRole
from domain.navigation import can_view
from domain.services.activity_logger import ActivityLogger

router = APIRouter()


@router.get("/", response_model=List[ActivityLogRead])
async def list_activity_logs(
    limit: Optional[int] = None,
    staff: StaffMember = Depends(get_current_staff),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    if not can_view(staff.role, "logs"):
        raise HTTPException(status_code=403, detail="Insufficient role")

    if staff.role == StaffRole.ADMIN.value:
        return await audit.list_all(limit or settings.all_logs_limit)
    return await audit.list_mine(staff.id, limit or settings.own_logs_limit)
