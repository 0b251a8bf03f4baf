"""
Session Store & Validator

The session cookie value is ``<session id>.<secret>``. The id locates
the row; the secret is compared against the stored SHA-256 hash in
constant time, so a leaked database row cannot be replayed as a cookie.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Tuple
from uuid import UUID

from crm_auth.app.services.security import hash_token, token_matches
from crm_auth.app.services.settings import SESSION_TOUCH_THRESHOLD
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Session, SessionState

logger = logging.getLogger(__name__)


@dataclass
class IssuedSession:
    session: Session
    cookie_value: str


@dataclass
class SessionCheck:
    state: SessionState
    session: Optional[Session] = None

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.active


def format_session_cookie(session_id: UUID, secret: str) -> str:
    return f"{session_id}.{secret}"


def parse_session_cookie(value: Optional[str]) -> Optional[Tuple[UUID, str]]:
    if not value or "." not in value:
        return None
    session_id, _, secret = value.partition(".")
    if not secret:
        return None
    try:
        return UUID(session_id), secret
    except ValueError:
        return None


class SessionManager:
    """
    Business Rules:
    - Expiry is fixed at creation; touching never extends it
    - last_accessed_at is written only when older than the touch threshold
    - Revocation is idempotent and never reactivates a session
    - The caller owns the transaction (commit happens in the use case)
    """

    def __init__(self, uow: UnitOfWork, touch_threshold: timedelta = SESSION_TOUCH_THRESHOLD):
        self.uow = uow
        self.touch_threshold = touch_threshold

    async def create(
        self,
        user_id: UUID,
        organization_id: UUID,
        duration: timedelta,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> IssuedSession:
        now = utcnow()
        secret = secrets.token_urlsafe(32)
        session = Session(
            user_id=user_id,
            organization_id=organization_id,
            secret_hash=hash_token(secret),
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
            last_accessed_at=now,
            expires_at=now + duration,
        )
        session = await self.uow.sessions.create(session)
        return IssuedSession(session=session, cookie_value=format_session_cookie(session.id, secret))

    async def validate(self, cookie_value: Optional[str]) -> SessionCheck:
        parsed = parse_session_cookie(cookie_value)
        if parsed is None:
            return SessionCheck(SessionState.invalid)

        session_id, secret = parsed
        session = await self.uow.sessions.get_by_id(session_id)
        if session is None or not token_matches(secret, session.secret_hash):
            return SessionCheck(SessionState.invalid)

        if session.revoked_at is not None:
            return SessionCheck(SessionState.revoked, session)

        now = utcnow()
        if session.expires_at <= now:
            return SessionCheck(SessionState.expired, session)

        if self._needs_touch(session, now):
            await self.uow.sessions.touch(session.id, now)
            session.last_accessed_at = now

        return SessionCheck(SessionState.active, session)

    async def revoke(self, session_id: UUID) -> bool:
        revoked = await self.uow.sessions.revoke_by_id(session_id, utcnow())
        if not revoked:
            logger.debug("Session %s was already revoked or missing", session_id)
        return revoked

    async def revoke_all_others(self, user_id: UUID, current_session_id: UUID) -> int:
        return await self.uow.sessions.revoke_all_except_session(
            user_id, current_session_id, utcnow()
        )

    async def revoke_all(self, user_id: UUID) -> int:
        return await self.uow.sessions.revoke_all_by_user_id(user_id, utcnow())

    def _needs_touch(self, session: Session, now: datetime) -> bool:
        return now - session.last_accessed_at >= self.touch_threshold
