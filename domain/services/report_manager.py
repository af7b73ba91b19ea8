"""Internal reports: draft -> published -> archived"""
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import structlog
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from domain.errors import RecordNotFoundError
from domain.lifecycle import check_report_transition
from domain.models import Report
from domain.models.report import ReportCreate, ReportStatus
from domain.models.staff_member import StaffRole
from domain.navigation import effective_role
from domain.services.activity_logger import Actions, ActivityLogger

logger = structlog.get_logger()

RESOURCE_TYPE = "reports"


class ReportManager:
    def __init__(self, session: AsyncSession, audit: ActivityLogger, actor_id: Optional[UUID] = None):
        self.session = session
        self.audit = audit
        self.actor_id = actor_id

    async def _audit(self, action: str, resource_id: Optional[UUID] = None, details: Optional[dict] = None) -> None:
        if self.actor_id is None:
            return
        await self.audit.log(self.actor_id, action, RESOURCE_TYPE, resource_id, details)

    async def create(self, report: ReportCreate) -> Report:
        db_report = Report(
            title=report.title,
            description=report.description,
            report_type=report.report_type.value,
            status=ReportStatus.DRAFT.value,
            created_by=self.actor_id,
            data={},
        )
        self.session.add(db_report)
        await self.session.commit()
        await self.session.refresh(db_report)

        await self._audit(Actions.CREATE_REPORT, db_report.id, {"report_title": report.title})
        return db_report

    async def get(self, report_id: UUID) -> Report:
        report = await self.session.get(Report, report_id)
        if report is None:
            raise RecordNotFoundError("report", report_id)
        return report

    async def set_status(self, report_id: UUID, new_status: Union[str, ReportStatus]) -> Report:
        report = await self.get(report_id)
        status = check_report_transition(report.status, new_status)
        if status.value == report.status:
            return report

        report.status = status.value
        self.session.add(report)
        await self.session.commit()
        await self.session.refresh(report)

        logger.info("report_status_changed", report_id=str(report_id), status=status.value)
        if status == ReportStatus.PUBLISHED:
            await self._audit(Actions.PUBLISH_REPORT, report_id)
        else:
            await self._audit(Actions.UPDATE_REPORT, report_id, {"new_status": status.value})
        return report

    async def list(self, viewer_role: Optional[str]) -> List[Report]:
        """Newest first. Viewers (and unknown roles) only get published reports."""
        query = select(Report).order_by(Report.created_at.desc())

        if effective_role(viewer_role) == StaffRole.VIEWER.value:
            query = query.where(Report.status == ReportStatus.PUBLISHED.value)

        result = await self.session.execute(query)
        reports = result.scalars().all()

        await self._audit(Actions.VIEW_REPORT)
        return list(reports)

    async def export(self, report_id: UUID, viewer_role: Optional[str] = None) -> Dict[str, Any]:
        """The report as a JSON-ready document."""
        report = await self.get(report_id)
        if (
            effective_role(viewer_role) == StaffRole.VIEWER.value
            and report.status != ReportStatus.PUBLISHED.value
        ):
            raise RecordNotFoundError("report", report_id)

        await self._audit(Actions.EXPORT_DATA, report_id, {"report_title": report.title})
        return report.model_dump(mode="json")
