"""Staff-side handling of FOI requests: listing, status changes and referrals.

Each mutation is committed first and audited afterwards; the audit entry is
not part of the same transaction and its failure is ignored.
"""
from typing import List, Optional, Union
from uuid import UUID

import structlog
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from domain.errors import RecordNotFoundError, ReferralError
from domain.lifecycle import check_request_transition, parse_status
from domain.models import FoiRequest
from domain.models.foi_request import RequestStatus
from domain.models.timestamps import utc_now
from domain.services.activity_logger import Actions, ActivityLogger

logger = structlog.get_logger()

RESOURCE_TYPE = "forms"


class RequestLifecycle:
    def __init__(self, session: AsyncSession, audit: ActivityLogger, actor_id: Optional[UUID] = None):
        self.session = session
        self.audit = audit
        self.actor_id = actor_id

    async def _audit(self, action: str, resource_id: Optional[UUID] = None, details: Optional[dict] = None) -> None:
        if self.actor_id is None:
            return
        await self.audit.log(self.actor_id, action, RESOURCE_TYPE, resource_id, details)

    async def list(self, status: Optional[Union[str, RequestStatus]] = None) -> List[FoiRequest]:
        query = select(FoiRequest).order_by(FoiRequest.created_at.desc())

        if status:
            status = parse_status(RequestStatus, status, "request")
            query = query.where(FoiRequest.status == status.value)

        result = await self.session.execute(query)
        requests = result.scalars().all()

        await self._audit(Actions.VIEW_FORM, details={"filter": status.value if status else "all"})
        return list(requests)

    async def get(self, request_id: UUID) -> FoiRequest:
        request = await self.session.get(FoiRequest, request_id)
        if request is None:
            raise RecordNotFoundError("request", request_id)
        return request

    async def set_status(self, request_id: UUID, new_status: Union[str, RequestStatus]) -> FoiRequest:
        """Move a request to ``new_status`` if the state machine allows it."""
        request = await self.get(request_id)
        status = check_request_transition(request.status, new_status)

        request.status = status.value
        request.updated_at = utc_now()
        self.session.add(request)
        await self.session.commit()
        await self.session.refresh(request)

        logger.info("foi_request_status_changed", request_id=str(request_id), status=status.value)
        await self._audit(Actions.UPDATE_FORM, request_id, {"new_status": status.value})
        return request

    async def refer(self, request_id: UUID, department: str, note: Optional[str] = None) -> FoiRequest:
        """Refer a request to a department; this also puts it in review.

        The referral fields and the status are written in one commit.
        """
        department = (department or "").strip()
        if not department:
            raise ReferralError("Please select a department")

        request = await self.get(request_id)
        check_request_transition(request.status, RequestStatus.IN_REVIEW)

        now = utc_now()
        request.referred_to = department
        request.referred_at = now
        request.status = RequestStatus.IN_REVIEW.value
        request.notes = note or None
        request.updated_at = now
        self.session.add(request)
        await self.session.commit()
        await self.session.refresh(request)

        logger.info("foi_request_referred", request_id=str(request_id), department=department)
        await self._audit(
            Actions.UPDATE_FORM,
            request_id,
            {"action": "referred", "referred_to": department, "note": note},
        )
        return request
