from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.adapter.repositories.base import flush_unique
from crm_auth.app.repositories.user_repository import IUserRepository
from crm_auth.domain.entities import Organization, User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a live user of a live organization by email"""
        stmt = (
            select(User)
            .join(Organization, Organization.id == User.organization_id)
            .where(
                User.email == email.strip().lower(),
                User.deleted_at.is_(None),
                Organization.deleted_at.is_(None),
            )
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a live user by ID"""
        stmt = select(User).where(User.id == user_id, User.deleted_at.is_(None))
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def email_exists(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        result = await self.session.exec(stmt)
        return result.first() is not None

    async def create(self, user: User) -> User:
        """Create a new user"""
        user.email = user.email.strip().lower()
        self.session.add(user)
        await flush_unique(self.session)
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def record_failed_login(self, user_id: UUID) -> int:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(failed_login_attempts=User.failed_login_attempts + 1)
            .returning(User.failed_login_attempts)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def lock(self, user_id: UUID, until: datetime) -> None:
        stmt = update(User).where(User.id == user_id).values(locked_until=until)
        await self.session.execute(stmt)

    async def reset_login_state(self, user_id: UUID, at: datetime) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(failed_login_attempts=0, locked_until=None, last_login_at=at)
        )
        await self.session.execute(stmt)

    async def mark_email_verified(self, user_id: UUID, at: datetime) -> bool:
        stmt = (
            update(User)
            .where(User.id == user_id, User.email_verified_at.is_(None))
            .values(email_verified_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def set_password(self, user_id: UUID, password_hash: str, at: datetime) -> None:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(password_hash=password_hash, password_changed_at=at)
        )
        await self.session.execute(stmt)
