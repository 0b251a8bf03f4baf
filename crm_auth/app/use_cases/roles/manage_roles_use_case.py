"""
Manage Roles Use Case

Create, update, re-permission and delete roles of an organization.
"""

import logging
from typing import List, Optional
from uuid import UUID

from crm_auth.app.repositories.errors import UniqueConstraintViolation
from crm_auth.app.services.audit import AuditAction, AuditContext, AuditEmitter, AuditEntry, RequestMeta
from crm_auth.app.services.rbac import AuthContext, check_role_mutable
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Role
from crm_auth.libs.result import Error, Result, Return
from .dtos import CreateRoleCommand, RoleDetail, UpdateRoleCommand, build_role_detail

logger = logging.getLogger(__name__)

ROLE_NOT_FOUND = Error("ROLE_NOT_FOUND", "Role not found")
ROLE_NAME_EXISTS = Error("ROLE_NAME_EXISTS", "Role name already exists")
INVALID_PERMISSIONS = Error("VALIDATION_ERROR", "One or more permission IDs are invalid")


class ManageRolesUseCase:
    """
    Use case for role management.

    Business Rules:
    - Roles are only visible inside their own organization
    - Role names are unique (case-insensitive) among live roles
    - The default role cannot be renamed, re-described, re-permissioned
      or deleted, whatever the caller's permissions
    - A role with assigned users cannot be deleted
    - Every change is audited with before/after snapshots
    """

    def __init__(self, uow: UnitOfWork, audit: AuditEmitter):
        self.uow = uow
        self.audit = audit

    async def create_role(
        self, ctx: AuthContext, command: CreateRoleCommand, meta: Optional[RequestMeta] = None
    ) -> Result[RoleDetail]:
        actor_id, organization_id = ctx.user_id, ctx.organization_id

        async with self.uow:
            if await self.uow.roles.name_taken(organization_id, command.name):
                return Return.err(ROLE_NAME_EXISTS)

            if not await self._permissions_exist(command.permission_ids):
                return Return.err(INVALID_PERMISSIONS)

            try:
                role = await self.uow.roles.create(
                    Role(
                        organization_id=organization_id,
                        name=command.name.strip(),
                        description=command.description,
                        is_default=False,
                    )
                )
            except UniqueConstraintViolation:
                await self.uow.rollback()
                return Return.err(ROLE_NAME_EXISTS)

            await self.uow.roles.replace_permissions(role.id, command.permission_ids)
            permissions = await self.uow.roles.get_permissions(role.id)
            detail = build_role_detail(role, permissions)

            await self.uow.commit()

        self._emit(
            ctx=AuditContext.from_meta(meta, organization_id, actor_id),
            action=AuditAction.ROLE_CREATE,
            role_id=role.id,
            after=detail,
        )
        logger.info("Role %s created in organization %s", role.id, organization_id)
        return Return.ok(detail)

    async def update_role(
        self,
        ctx: AuthContext,
        role_id: UUID,
        command: UpdateRoleCommand,
        meta: Optional[RequestMeta] = None,
    ) -> Result[RoleDetail]:
        actor_id, organization_id = ctx.user_id, ctx.organization_id
        fields = command.model_fields_set

        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id, organization_id)
            if role is None:
                return Return.err(ROLE_NOT_FOUND)

            guard = check_role_mutable(
                role, rename="name" in fields, describe="description" in fields
            )
            if guard.is_err():
                return guard

            permissions = await self.uow.roles.get_permissions(role.id)
            before = build_role_detail(role, permissions)

            if "name" in fields and command.name is not None:
                if await self.uow.roles.name_taken(organization_id, command.name, exclude_role_id=role.id):
                    return Return.err(ROLE_NAME_EXISTS)
                role.name = command.name.strip()
            if "description" in fields:
                role.description = command.description

            try:
                role = await self.uow.roles.update(role)
            except UniqueConstraintViolation:
                await self.uow.rollback()
                return Return.err(ROLE_NAME_EXISTS)
            after = build_role_detail(role, permissions)

            await self.uow.commit()

        self._emit(
            ctx=AuditContext.from_meta(meta, organization_id, actor_id),
            action=AuditAction.ROLE_UPDATE,
            role_id=role.id,
            before=before,
            after=after,
        )
        return Return.ok(after)

    async def set_permissions(
        self,
        ctx: AuthContext,
        role_id: UUID,
        permission_ids: List[UUID],
        meta: Optional[RequestMeta] = None,
    ) -> Result[RoleDetail]:
        actor_id, organization_id = ctx.user_id, ctx.organization_id

        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id, organization_id)
            if role is None:
                return Return.err(ROLE_NOT_FOUND)

            guard = check_role_mutable(role, change_permissions=True)
            if guard.is_err():
                return guard

            if not await self._permissions_exist(permission_ids):
                return Return.err(INVALID_PERMISSIONS)

            before = build_role_detail(role, await self.uow.roles.get_permissions(role.id))
            await self.uow.roles.replace_permissions(role.id, permission_ids)
            after = build_role_detail(role, await self.uow.roles.get_permissions(role.id))

            await self.uow.commit()

        self._emit(
            ctx=AuditContext.from_meta(meta, organization_id, actor_id),
            action=AuditAction.ROLE_PERMISSION_GRANT,
            role_id=role.id,
            before=before,
            after=after,
        )
        return Return.ok(after)

    async def delete_role(
        self, ctx: AuthContext, role_id: UUID, meta: Optional[RequestMeta] = None
    ) -> Result[None]:
        actor_id, organization_id = ctx.user_id, ctx.organization_id

        async with self.uow:
            role = await self.uow.roles.get_by_id(role_id, organization_id)
            if role is None:
                return Return.err(ROLE_NOT_FOUND)

            guard = check_role_mutable(role, delete=True)
            if guard.is_err():
                return guard

            user_count = await self.uow.roles.count_users(role.id)
            if user_count > 0:
                return Return.err(
                    Error("CONFLICT", f"Cannot delete role with {user_count} assigned user(s)")
                )

            before = build_role_detail(role, await self.uow.roles.get_permissions(role.id))
            await self.uow.roles.soft_delete(role.id, utcnow())
            await self.uow.commit()

        self._emit(
            ctx=AuditContext.from_meta(meta, organization_id, actor_id),
            action=AuditAction.ROLE_DELETE,
            role_id=role_id,
            before=before,
        )
        logger.info("Role %s deleted", role_id)
        return Return.ok(None)

    async def _permissions_exist(self, permission_ids: List[UUID]) -> bool:
        unique_ids = set(permission_ids)
        found = await self.uow.permissions.get_by_ids(list(unique_ids))
        return len(found) == len(unique_ids)

    def _emit(
        self,
        ctx: AuditContext,
        action: AuditAction,
        role_id: UUID,
        before: Optional[RoleDetail] = None,
        after: Optional[RoleDetail] = None,
    ) -> None:
        self.audit.emit(
            ctx,
            AuditEntry(
                action,
                "role",
                role_id,
                before=before.model_dump() if before else None,
                after=after.model_dump() if after else None,
            ),
        )
