from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.adapter.repositories.base import flush_unique
from crm_auth.app.repositories.organization_repository import IOrganizationRepository
from crm_auth.domain.entities import Organization


class OrganizationRepository(IOrganizationRepository):
    """Organization repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, organization_id: UUID) -> Optional[Organization]:
        """Get a live organization by ID"""
        stmt = select(Organization).where(
            Organization.id == organization_id, Organization.deleted_at.is_(None)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, organization: Organization) -> Organization:
        """Create a new organization"""
        self.session.add(organization)
        await flush_unique(self.session)
        await self.session.refresh(organization)
        return organization
