from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.auth_token_repository import IAuthTokenRepository
from crm_auth.domain.entities import AuthToken, TokenKind


class AuthTokenRepository(IAuthTokenRepository):
    """AuthToken repository implementation using SQLModel, bound to one kind"""

    def __init__(self, session: AsyncSession, kind: TokenKind):
        self.session = session
        self.kind = kind

    async def invalidate_subject(self, subject: UUID, at: datetime) -> int:
        """Delete the user's previous tokens of this kind"""
        stmt = delete(AuthToken).where(AuthToken.user_id == subject, AuthToken.kind == self.kind)
        result = await self.session.execute(stmt)
        return result.rowcount

    async def insert(
        self, subject: UUID, token_hash: str, expires_at: datetime, **fields: Any
    ) -> AuthToken:
        token = AuthToken(
            user_id=subject, kind=self.kind, token_hash=token_hash, expires_at=expires_at
        )
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def find_by_hash(self, token_hash: str) -> Optional[AuthToken]:
        stmt = select(AuthToken).where(
            AuthToken.token_hash == token_hash, AuthToken.kind == self.kind
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def mark_used(self, record_id: UUID, at: datetime) -> bool:
        stmt = (
            update(AuthToken)
            .where(AuthToken.id == record_id, AuthToken.used_at.is_(None))
            .values(used_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def get_by_user_id(self, user_id: UUID) -> List[AuthToken]:
        stmt = select(AuthToken).where(AuthToken.user_id == user_id, AuthToken.kind == self.kind)
        result = await self.session.exec(stmt)
        return list(result.all())
