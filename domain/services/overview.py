"""Dashboard overview counters"""
from typing import Dict

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlmodel.ext.asyncio.session import AsyncSession

from domain.models import FoiRequest, Report
from domain.models.foi_request import CONCERN_TYPES, OTHER_CONCERN, RequestStatus
from domain.models.report import ReportStatus


class OverviewStats(BaseModel):
    total_forms: int
    pending_forms: int
    total_reports: int  # published only
    resolved_concerns: int
    concerns: Dict[str, int]


async def _count(session: AsyncSession, model, *conditions) -> int:
    query = select(func.count()).select_from(model)
    for condition in conditions:
        query = query.where(condition)
    result = await session.execute(query)
    return result.scalar_one()


async def get_overview(session: AsyncSession) -> OverviewStats:
    concerns = {concern: 0 for concern in CONCERN_TYPES}

    result = await session.execute(
        select(FoiRequest.concern, func.count()).group_by(FoiRequest.concern)
    )
    for concern, count in result.all():
        # Free-text concerns were submitted through "Other"
        key = concern if concern in concerns else OTHER_CONCERN
        concerns[key] += count

    return OverviewStats(
        total_forms=await _count(session, FoiRequest),
        pending_forms=await _count(session, FoiRequest, FoiRequest.status == RequestStatus.PENDING.value),
        total_reports=await _count(session, Report, Report.status == ReportStatus.PUBLISHED.value),
        resolved_concerns=await _count(session, FoiRequest, FoiRequest.status == RequestStatus.RESOLVED.value),
        concerns=concerns,
    )
