from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.session_repository import ISessionRepository
from crm_auth.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_active_by_user(self, user_id: UUID, now: datetime) -> List[Session]:
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.revoked_at.is_(None),
                Session.expires_at > now,
            )
            .order_by(Session.last_accessed_at.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def touch(self, session_id: UUID, at: datetime) -> None:
        stmt = update(Session).where(Session.id == session_id).values(last_accessed_at=at)
        await self.session.execute(stmt)

    async def revoke_by_id(self, session_id: UUID, at: datetime) -> bool:
        """Revoke a specific session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked_at.is_(None))
            .values(revoked_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def revoke_all_by_user_id(self, user_id: UUID, at: datetime) -> int:
        """Revoke all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.revoked_at.is_(None))
            .values(revoked_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def revoke_all_except_session(
        self, user_id: UUID, session_id: UUID, at: datetime
    ) -> int:
        """Revoke all sessions for a user except the specified session"""
        stmt = (
            update(Session)
            .where(
                Session.user_id == user_id,
                Session.id != session_id,
                Session.revoked_at.is_(None),
            )
            .values(revoked_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
