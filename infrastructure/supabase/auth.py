"""
Supabase Auth (GoTrue) client
Password sign-in, sign-out, session lookup and auth-state change events
"""
from typing import Callable, List, Optional
from uuid import UUID

import httpx
import structlog
from pydantic import BaseModel

from config import settings

logger = structlog.get_logger()

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

AuthStateCallback = Callable[[str, Optional["AuthSession"]], None]


class AuthError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthUser(BaseModel):
    id: UUID
    email: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None
    user: AuthUser


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or f"HTTP {response.status_code}"
    )


class SupabaseAuthClient:
    """Client for the Supabase auth REST API.

    Holds at most one session, like the browser SDK does, and notifies
    subscribers whenever it changes.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_anon_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self.headers = {
            "apikey": self.api_key,
            "Content-Type": "application/json",
        }

        self._session: Optional[AuthSession] = None
        self._listeners: List[AuthStateCallback] = []

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Password grant. Raises AuthError with the provider's message."""
        try:
            async with self._client() as client:
                response = await client.post(
                    "/auth/v1/token",
                    params={"grant_type": "password"},
                    json={"email": email, "password": password},
                )
        except httpx.HTTPError as e:
            logger.error("auth_sign_in_failed", error=str(e))
            raise AuthError("Authentication service unavailable") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning("auth_sign_in_rejected", status=response.status_code, message=message)
            raise AuthError(message, response.status_code)

        session = AuthSession.model_validate(response.json())
        self._session = session
        logger.info("auth_signed_in", user_id=str(session.user.id))
        self._emit(SIGNED_IN, session)
        return session

    async def sign_out(self) -> None:
        """Revoke the current session; local state is cleared either way."""
        session = self._session
        error: Optional[AuthError] = None

        if session is not None:
            try:
                async with self._client() as client:
                    response = await client.post(
                        "/auth/v1/logout",
                        headers={"Authorization": f"Bearer {session.access_token}"},
                    )
                if response.status_code >= 400:
                    error = AuthError(_error_message(response), response.status_code)
            except httpx.HTTPError as e:
                error = AuthError(str(e))

        self._session = None
        self._emit(SIGNED_OUT, None)

        if error is not None:
            logger.warning("auth_sign_out_failed", error=error.message)
            raise error

    async def get_user(self, access_token: Optional[str] = None) -> AuthUser:
        token = access_token or (self._session.access_token if self._session else None)
        if not token:
            raise AuthError("No active session", 401)

        try:
            async with self._client() as client:
                response = await client.get(
                    "/auth/v1/user",
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            logger.error("auth_get_user_failed", error=str(e))
            raise AuthError("Authentication service unavailable") from e

        if response.status_code >= 400:
            raise AuthError(_error_message(response), response.status_code)

        return AuthUser.model_validate(response.json())

    async def get_session(self) -> Optional[AuthSession]:
        return self._session

    async def set_session(self, access_token: str, refresh_token: Optional[str] = None) -> AuthSession:
        """Adopt a token issued elsewhere (bearer header) after validating it."""
        user = await self.get_user(access_token)
        session = AuthSession(access_token=access_token, refresh_token=refresh_token, user=user)
        self._session = session
        self._emit(SIGNED_IN, session)
        return session

    def on_auth_state_change(self, callback: AuthStateCallback) -> Callable[[], None]:
        """Subscribe to session changes. Returns the unsubscribe handle."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: str, session: Optional[AuthSession]) -> None:
        for callback in list(self._listeners):
            try:
                callback(event, session)
            except Exception as e:
                logger.error("auth_listener_failed", auth_event=event, error=str(e))
