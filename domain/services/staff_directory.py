"""Staff member administration (admin only)"""
from typing import List, Optional
from uuid import UUID

import structlog
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from domain.errors import RecordNotFoundError
from domain.models import StaffMember
from domain.models.staff_member import StaffMemberUpdate
from domain.models.timestamps import utc_now
from domain.services.activity_logger import Actions, ActivityLogger

logger = structlog.get_logger()

RESOURCE_TYPE = "staff_members"


class StaffDirectory:
    def __init__(self, session: AsyncSession, audit: ActivityLogger, actor_id: Optional[UUID] = None):
        self.session = session
        self.audit = audit
        self.actor_id = actor_id

    async def _audit(self, action: str, resource_id: Optional[UUID] = None, details: Optional[dict] = None) -> None:
        if self.actor_id is None:
            return
        await self.audit.log(self.actor_id, action, RESOURCE_TYPE, resource_id, details)

    async def list(self) -> List[StaffMember]:
        query = select(StaffMember).order_by(StaffMember.created_at.desc())
        result = await self.session.execute(query)
        members = result.scalars().all()

        await self._audit(Actions.VIEW_STAFF)
        return list(members)

    async def get(self, member_id: UUID) -> StaffMember:
        member = await self.session.get(StaffMember, member_id)
        if member is None:
            raise RecordNotFoundError("staff member", member_id)
        return member

    async def update(self, member_id: UUID, changes: StaffMemberUpdate) -> StaffMember:
        member = await self.get(member_id)

        if changes.role is not None:
            member.role = changes.role.value
        if changes.department is not None:
            member.department = changes.department
        member.updated_at = utc_now()

        self.session.add(member)
        await self.session.commit()
        await self.session.refresh(member)

        logger.info("staff_member_updated", member_id=str(member_id), role=member.role)
        await self._audit(
            Actions.EDIT_STAFF,
            member_id,
            {"new_role": member.role, "new_department": member.department},
        )
        return member

    async def toggle_active(self, member_id: UUID) -> StaffMember:
        """Flip is_active. Sessions already issued stay valid at the provider."""
        member = await self.get(member_id)
        member.is_active = not member.is_active
        member.updated_at = utc_now()

        self.session.add(member)
        await self.session.commit()
        await self.session.refresh(member)

        logger.info("staff_member_toggled", member_id=str(member_id), is_active=member.is_active)
        await self._audit(Actions.TOGGLE_STAFF_STATUS, member_id, {"new_status": member.is_active})
        return member
