"""Reports API - internal publications"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlmodel.ext.asyncio.session import AsyncSession

from api.deps import get_activity_logger, get_current_staff, require_editor
from domain.models import StaffMember
from domain.models.report import ReportCreate, ReportRead, ReportStatusUpdate
from domain.services.activity_logger import ActivityLogger
from domain.services.report_manager import ReportManager
from infrastructure.database import get_session

router = APIRouter()


@router.get("/", response_model=List[ReportRead])
async def list_reports(
    staff: StaffMember = Depends(get_current_staff),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """List reports, newest first (viewers only see published ones)"""
    return await ReportManager(session, audit, staff.id).list(staff.role)


@router.post("/", response_model=ReportRead, status_code=201)
async def create_report(
    report: ReportCreate,
    staff: StaffMember = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """Create a draft report"""
    return await ReportManager(session, audit, staff.id).create(report)


@router.patch("/{report_id}/status", response_model=ReportRead)
async def update_report_status(
    report_id: UUID,
    body: ReportStatusUpdate,
    staff: StaffMember = Depends(require_editor),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    return await ReportManager(session, audit, staff.id).set_status(report_id, body.status)


@router.get("/{report_id}/export")
async def export_report(
    report_id: UUID,
    staff: StaffMember = Depends(get_current_staff),
    session: AsyncSession = Depends(get_session),
    audit: ActivityLogger = Depends(get_activity_logger),
):
    """Download a report as a JSON file"""
    document = await ReportManager(session, audit, staff.id).export(report_id, staff.role)
    filename = f"{document['title']}.json".replace('"', "")
    return JSONResponse(
        content=document,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
