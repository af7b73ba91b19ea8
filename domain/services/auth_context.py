"""Who is acting right now.

``AuthContext`` follows the auth client's session. A session marks the context
as logged in at once; the matching staff member row is fetched in a background
task, so ``role`` stays ``None`` until that fetch lands. When sessions change
quickly only the newest fetch is applied.
"""

from __future__ import annotations

import asyncio
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.orm import sessionmaker

from domain.models import StaffMember
from infrastructure.database import get_session_maker
from infrastructure.supabase.auth import AuthError, AuthSession, AuthUser, SupabaseAuthClient

logger = structlog.get_logger()


class AuthContext:
    def __init__(self, auth: SupabaseAuthClient, session_maker: Optional[sessionmaker] = None):
        self.auth = auth
        self._session_maker = session_maker

        self.user: Optional[AuthUser] = None
        self.staff_member: Optional[StaffMember] = None
        self.is_logged_in = False
        self.is_loading = True

        self._unsubscribe = None
        self._generation = 0
        self._staff_task: Optional[asyncio.Task] = None

    @property
    def session_maker(self) -> sessionmaker:
        return self._session_maker or get_session_maker()

    @property
    def role(self) -> Optional[str]:
        return self.staff_member.role if self.staff_member else None

    async def start(self) -> "AuthContext":
        self._unsubscribe = self.auth.on_auth_state_change(self._on_auth_state_change)

        try:
            session = await self.auth.get_session()
            if session is not None:
                self._apply_session(session)
        except AuthError as e:
            logger.error("auth_initialization_failed", error=e.message)
        finally:
            self.is_loading = False

        return self

    async def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel_pending()

    async def __aenter__(self) -> "AuthContext":
        return await self.start()

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def logout(self) -> None:
        try:
            await self.auth.sign_out()
        except AuthError as e:
            logger.warning("auth_logout_failed", error=e.message)
        self._clear()

    async def wait_for_staff(self) -> Optional[StaffMember]:
        """Wait for the pending staff lookup, if any."""
        while self._staff_task is not None and not self._staff_task.done():
            await asyncio.wait({self._staff_task})
        return self.staff_member

    def _on_auth_state_change(self, event: str, session: Optional[AuthSession]) -> None:
        logger.debug("auth_state_changed", auth_event=event)
        if session is not None:
            self._apply_session(session)
        else:
            self._clear()

    def _apply_session(self, session: AuthSession) -> None:
        if self.user is None or self.user.id != session.user.id:
            self.staff_member = None
        self.user = session.user
        self.is_logged_in = True

        self._cancel_pending()
        self._generation += 1
        self._staff_task = asyncio.create_task(
            self._resolve_staff(session.user.id, self._generation)
        )

    async def _resolve_staff(self, user_id: UUID, generation: int) -> None:
        try:
            async with self.session_maker() as db:
                staff = await db.get(StaffMember, user_id)
        except Exception as e:
            logger.error("staff_lookup_failed", user_id=str(user_id), error=str(e))
            return

        if generation != self._generation:
            logger.debug("staff_lookup_stale", user_id=str(user_id))
            return

        if staff is None:
            logger.warning("staff_member_missing", user_id=str(user_id))
            return

        self.staff_member = staff

    def _cancel_pending(self) -> None:
        if self._staff_task is not None and not self._staff_task.done():
            self._staff_task.cancel()
        self._staff_task = None

    def _clear(self) -> None:
        self._generation += 1
        self._cancel_pending()
        self.user = None
        self.staff_member = None
        self.is_logged_in = False
