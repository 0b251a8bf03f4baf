from typing import Dict, List
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.app.repositories.permission_repository import IPermissionRepository
from crm_auth.domain.entities import Permission


class PermissionRepository(IPermissionRepository):
    """Permission repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_all(self) -> List[Permission]:
        result = await self.session.exec(select(Permission).order_by(Permission.name))
        return list(result.all())

    async def get_by_ids(self, permission_ids: List[UUID]) -> List[Permission]:
        if not permission_ids:
            return []
        stmt = select(Permission).where(Permission.id.in_(permission_ids))
        result = await self.session.exec(stmt)
        return list(result.all())

    async def ensure_catalogue(self, catalogue: Dict[str, str]) -> int:
        result = await self.session.exec(select(Permission.name))
        existing = set(result.all())
        missing = [
            Permission(name=name, description=description)
            for name, description in catalogue.items()
            if name not in existing
        ]
        self.session.add_all(missing)
        await self.session.flush()
        return len(missing)
