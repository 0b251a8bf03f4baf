from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import delete, func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from crm_auth.adapter.repositories.base import flush_unique
from crm_auth.app.repositories.role_repository import IRoleRepository
from crm_auth.domain.entities import Permission, Role, RolePermission, User


class RoleRepository(IRoleRepository):
    """Role repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, role_id: UUID, organization_id: UUID) -> Optional[Role]:
        """Get a live role by ID, scoped to the organization"""
        stmt = select(Role).where(
            Role.id == role_id,
            Role.organization_id == organization_id,
            Role.deleted_at.is_(None),
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def list_with_user_counts(self, organization_id: UUID) -> List[Tuple[Role, int]]:
        """List live roles, default role first, then by name"""
        user_count = (
            select(func.count(User.id))
            .where(User.role_id == Role.id, User.deleted_at.is_(None))
            .correlate(Role)
            .scalar_subquery()
        )
        stmt = (
            select(Role, user_count)
            .where(Role.organization_id == organization_id, Role.deleted_at.is_(None))
            .order_by(Role.is_default.desc(), Role.name)
        )
        result = await self.session.execute(stmt)
        return [(role, count) for role, count in result.all()]

    async def name_taken(
        self, organization_id: UUID, name: str, exclude_role_id: Optional[UUID] = None
    ) -> bool:
        """Case-insensitive name check among live roles"""
        stmt = select(Role.id).where(
            Role.organization_id == organization_id,
            Role.name_key == name.strip().lower(),
            Role.deleted_at.is_(None),
        )
        if exclude_role_id is not None:
            stmt = stmt.where(Role.id != exclude_role_id)
        result = await self.session.exec(stmt)
        return result.first() is not None

    async def create(self, role: Role) -> Role:
        role.name_key = role.name.strip().lower()
        self.session.add(role)
        await flush_unique(self.session)
        await self.session.refresh(role)
        return role

    async def update(self, role: Role) -> Role:
        role.name_key = role.name.strip().lower()
        self.session.add(role)
        await flush_unique(self.session)
        await self.session.refresh(role)
        return role

    async def soft_delete(self, role_id: UUID, at: datetime) -> bool:
        stmt = (
            update(Role)
            .where(Role.id == role_id, Role.deleted_at.is_(None))
            .values(deleted_at=at)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def count_users(self, role_id: UUID) -> int:
        stmt = select(func.count(User.id)).where(
            User.role_id == role_id, User.deleted_at.is_(None)
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def get_permissions(self, role_id: UUID) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.name)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def replace_permissions(self, role_id: UUID, permission_ids: List[UUID]) -> None:
        await self.session.execute(delete(RolePermission).where(RolePermission.role_id == role_id))
        self.session.add_all(
            RolePermission(role_id=role_id, permission_id=permission_id)
            for permission_id in dict.fromkeys(permission_ids)
        )
        await self.session.flush()
