"""
Role Use Case DTOs (Data Transfer Objects)

Commands and responses for role and permission management.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from crm_auth.domain.entities import Permission, Role


# ============================================================================
# Command DTOs
# ============================================================================


class CreateRoleCommand(BaseModel):
    name: str
    description: Optional[str] = None
    permission_ids: List[UUID] = []


class UpdateRoleCommand(BaseModel):
    """Only fields explicitly set are applied"""

    name: Optional[str] = None
    description: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class PermissionInfo(BaseModel):
    id: str
    name: str
    description: Optional[str] = None


class PermissionListResponse(BaseModel):
    permissions: List[PermissionInfo]


class RoleSummary(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_default: bool
    user_count: int


class RoleListResponse(BaseModel):
    roles: List[RoleSummary]


class RoleDetail(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    is_default: bool
    permissions: List[PermissionInfo]


def build_permission_info(permission: Permission) -> PermissionInfo:
    return PermissionInfo(
        id=str(permission.id), name=permission.name, description=permission.description
    )


def build_role_detail(role: Role, permissions: List[Permission]) -> RoleDetail:
    return RoleDetail(
        id=str(role.id),
        name=role.name,
        description=role.description,
        is_default=role.is_default,
        permissions=[build_permission_info(p) for p in permissions],
    )
