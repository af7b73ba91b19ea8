"""Activity (audit) trail.

Writes are best effort: a failed write is logged and reported as ``False``,
never raised, so auditing can not block the action it describes. When an
``ActivityLogQueue`` is attached, entries are stamped at call time and written
by a background task instead of inline.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import structlog
from sqlalchemy.orm import sessionmaker
from sqlmodel import select

from config import settings
from domain.models import ActivityLog, StaffMember
from domain.models.activity_log import ActivityLogRead
from domain.models.staff_member import StaffSummary
from domain.models.timestamps import utc_now
from infrastructure.database import get_session_maker

logger = structlog.get_logger()


class Actions:
    """Recommended action labels"""
    LOGIN = "User Login"
    LOGOUT = "User Logout"
    VIEW_FORM = "View Submitted Form"
    CREATE_FORM = "Create Form"
    UPDATE_FORM = "Update Form"
    DELETE_FORM = "Delete Form"
    ASSIGN_FORM = "Assign Form"
    VIEW_REPORT = "View Report"
    CREATE_REPORT = "Create Report"
    PUBLISH_REPORT = "Publish Report"
    UPDATE_REPORT = "Update Report"
    VIEW_LOGS = "View Activity Logs"
    EXPORT_DATA = "Export Data"
    VIEW_STAFF = "View Staff Members"
    EDIT_STAFF = "Edit Staff Member"
    TOGGLE_STAFF_STATUS = "Toggle Staff Status"
    DASHBOARD_ACCESS = "Dashboard Access"


def build_entry(
    user_id: Union[UUID, str],
    action: str,
    resource_type: Optional[str] = None,
    resource_id: Optional[Union[UUID, str]] = None,
    details: Optional[Dict[str, Any]] = None,
    user_agent: Optional[str] = None,
) -> ActivityLog:
    now = utc_now()
    return ActivityLog(
        user_id=UUID(str(user_id)),
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id is not None else None,
        details={
            **(details or {}),
            "timestamp": now.isoformat(),
            "user_agent": user_agent or settings.default_user_agent,
        },
        created_at=now,
    )


def _summary(staff: Optional[StaffMember]) -> Optional[StaffSummary]:
    if staff is None:
        return None
    return StaffSummary(
        full_name=staff.full_name,
        email=staff.email,
        role=staff.role,
        department=staff.department,
    )


class ActivityLogger:
    def __init__(
        self,
        session_maker: Optional[sessionmaker] = None,
        user_agent: Optional[str] = None,
        queue: Optional["ActivityLogQueue"] = None,
    ):
        self._session_maker = session_maker
        self.user_agent = user_agent
        self.queue = queue

    @property
    def session_maker(self) -> sessionmaker:
        return self._session_maker or get_session_maker()

    async def log(
        self,
        user_id: Union[UUID, str],
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[Union[UUID, str]] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Record one action. Returns False instead of raising."""
        try:
            entry = build_entry(
                user_id, action, resource_type, resource_id, details, self.user_agent
            )
        except (TypeError, ValueError) as e:
            logger.error("activity_log_invalid_entry", action=action, error=str(e))
            return False

        if self.queue is not None:
            return self.queue.submit(entry)
        return await self.write(entry)

    async def write(self, entry: ActivityLog) -> bool:
        try:
            async with self.session_maker() as session:
                session.add(entry)
                await session.commit()
            logger.debug("activity_logged", action=entry.action, user_id=str(entry.user_id))
            return True
        except Exception as e:
            logger.error(
                "activity_log_write_failed",
                action=entry.action,
                user_id=str(entry.user_id),
                error=str(e),
            )
            return False

    async def list_mine(self, user_id: Union[UUID, str], limit: int = 100) -> List[ActivityLogRead]:
        """One actor's entries, newest first, joined with the actor's identity."""
        try:
            query = (
                select(ActivityLog, StaffMember)
                .outerjoin(StaffMember, StaffMember.id == ActivityLog.user_id)
                .where(ActivityLog.user_id == UUID(str(user_id)))
                .order_by(ActivityLog.created_at.desc())
                .limit(limit)
            )
            async with self.session_maker() as session:
                result = await session.execute(query)
                rows = result.all()

            return [
                ActivityLogRead(**log.model_dump(), staff_member=_summary(staff))
                for log, staff in rows
            ]
        except Exception as e:
            logger.error("activity_log_fetch_failed", user_id=str(user_id), error=str(e))
            return []

    async def list_all(self, limit: int = 200) -> List[ActivityLogRead]:
        """Everyone's entries, newest first; the actor is looked up per entry."""
        try:
            query = select(ActivityLog).order_by(ActivityLog.created_at.desc()).limit(limit)
            async with self.session_maker() as session:
                result = await session.execute(query)
                logs = result.scalars().all()

                entries = []
                for log in logs:
                    staff = await session.get(StaffMember, log.user_id)
                    entries.append(
                        ActivityLogRead(**log.model_dump(), staff_member=_summary(staff))
                    )
            return entries
        except Exception as e:
            logger.error("activity_log_fetch_failed", error=str(e))
            return []


class ActivityLogQueue:
    """Bounded queue of audit entries drained by one background task.

    Entries are written in submission order. A failed write is retried up to
    ``max_attempts`` times before the entry is dropped.
    """

    def __init__(
        self,
        writer: ActivityLogger,
        maxsize: Optional[int] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.writer = writer
        self.max_attempts = max_attempts or settings.audit_max_attempts
        self.retry_delay = settings.audit_retry_delay_seconds if retry_delay is None else retry_delay
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize or settings.audit_queue_size)
        self._worker: Optional[asyncio.Task] = None
        self.dropped = 0

    def submit(self, entry: ActivityLog) -> bool:
        try:
            self._queue.put_nowait(entry)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("activity_log_queue_full", action=entry.action, dropped=self.dropped)
            return False

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._drain())
            logger.info("activity_log_queue_started")

    async def _drain(self) -> None:
        while True:
            entry = await self._queue.get()
            try:
                for attempt in range(1, self.max_attempts + 1):
                    if await self.writer.write(entry):
                        break
                    if attempt < self.max_attempts:
                        await asyncio.sleep(self.retry_delay)
                else:
                    self.dropped += 1
                    logger.error(
                        "activity_log_dropped",
                        action=entry.action,
                        attempts=self.max_attempts,
                    )
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted entry has been handled."""
        await self._queue.join()

    async def stop(self) -> None:
        if self._worker is None:
            return
        await self.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info("activity_log_queue_stopped", dropped=self.dropped)
