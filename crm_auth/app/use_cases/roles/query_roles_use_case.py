from uuid import UUID

from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.libs.result import Error, Result, Return
from .dtos import (
    PermissionListResponse,
    RoleDetail,
    RoleListResponse,
    RoleSummary,
    build_permission_info,
    build_role_detail,
)


class QueryRolesUseCase:
    """Read side of role management, always scoped to the caller's organization"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def list_permissions(self) -> Result[PermissionListResponse]:
        async with self.uow:
            permissions = await self.uow.permissions.list_all()
            return Return.ok(
                PermissionListResponse(permissions=[build_permission_info(p) for p in permissions])
            )

    async def list_roles(self, ctx: AuthContext) -> Result[RoleListResponse]:
        organization_id = ctx.organization_id
        async with self.uow:
            rows = await self.uow.roles.list_with_user_counts(organization_id)
            return Return.ok(
                RoleListResponse(
                    roles=[
                        RoleSummary(
                            id=str(role.id),
                            name=role.name,
                            description=role.description,
                            is_default=role.is_default,
                            user_count=count,
                        )
                        for role, count in rows
                    ]
                )
            )

    async def get_role(self, ctx: AuthContext, role_id: UUID) -> Result[RoleDetail]:
        organization_id = ctx.organization_id
        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id, organization_id)
            if role is None:
                return Return.err(Error("ROLE_NOT_FOUND", "Role not found"))
            permissions = await self.uow.roles.get_permissions(role.id)
            return Return.ok(build_role_detail(role, permissions))
