from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.profile_repository import IProfileRepository
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Profile


class ProfileRepository(IProfileRepository):
    """Profile repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> Optional[Profile]:
        stmt = select(Profile).where(Profile.user_id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, profile: Profile) -> Profile:
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile

    async def update(self, profile: Profile) -> Profile:
        profile.updated_at = utcnow()
        self.session.add(profile)
        await self.session.flush()
        await self.session.refresh(profile)
        return profile
