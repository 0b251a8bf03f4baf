from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from pydantic import BaseModel, Field

from crm_auth.api.error import to_http_error
from crm_auth.app.services.audit import AuditEmitter, RequestMeta
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.roles import (
    CreateRoleCommand,
    ManageRolesUseCase,
    PermissionListResponse,
    QueryRolesUseCase,
    RoleDetail,
    RoleListResponse,
    UpdateRoleCommand,
)
from crm_auth.depends import (
    get_audit_emitter,
    get_auth_context,
    get_request_meta,
    get_unit_of_work,
    require_permission,
)

router = APIRouter(prefix="/roles", tags=["Roles"])


class CreateRoleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    permission_ids: List[UUID] = Field(default_factory=list)


class UpdateRoleRequest(BaseModel):
    """Partial update; omitted fields are left unchanged"""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class SetPermissionsRequest(BaseModel):
    permission_ids: List[UUID]


@router.get("/permissions", response_model=PermissionListResponse)
async def list_permissions(
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """List the global permission catalogue"""
    result = await QueryRolesUseCase(uow).list_permissions()
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get("", response_model=RoleListResponse)
async def list_roles(
    ctx: AuthContext = Depends(require_permission("roles:read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await QueryRolesUseCase(uow).list_roles(ctx)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.get("/{role_id}", response_model=RoleDetail)
async def get_role(
    role_id: UUID,
    ctx: AuthContext = Depends(require_permission("roles:read")),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await QueryRolesUseCase(uow).get_role(ctx, role_id)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("", status_code=status.HTTP_201_CREATED, response_model=RoleDetail)
async def create_role(
    request: CreateRoleRequest,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(require_permission("roles:write")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Create a custom role in the caller's organization.

    Raises:
        - 409 Conflict: Role name already exists
        - 422 Unprocessable Entity: Unknown permission IDs
    """
    command = CreateRoleCommand(**request.model_dump())
    result = await ManageRolesUseCase(uow, audit).create_role(ctx, command, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.patch("/{role_id}", response_model=RoleDetail)
async def update_role(
    role_id: UUID,
    request: UpdateRoleRequest,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(require_permission("roles:write")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Rename or redescribe a role.

    Raises:
        - 403 Forbidden: The default role cannot be renamed or redescribed
        - 404 Not Found: Role not in this organization
        - 409 Conflict: Role name already exists
    """
    command = UpdateRoleCommand(**request.model_dump(exclude_unset=True))
    result = await ManageRolesUseCase(uow, audit).update_role(ctx, role_id, command, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.put("/{role_id}/permissions", response_model=RoleDetail)
async def set_role_permissions(
    role_id: UUID,
    request: SetPermissionsRequest,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(require_permission("roles:write")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Replace the role's permission set"""
    use_case = ManageRolesUseCase(uow, audit)
    result = await use_case.set_permissions(ctx, role_id, request.permission_ids, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: UUID,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(require_permission("roles:delete")),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Soft-delete a role.

    Raises:
        - 403 Forbidden: The default role cannot be deleted
        - 409 Conflict: Users are still assigned to the role
    """
    result = await ManageRolesUseCase(uow, audit).delete_role(ctx, role_id, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
