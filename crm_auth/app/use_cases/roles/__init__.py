"""
Role Use Cases

RBAC management surface and permission catalogue seeding.
"""

from .manage_roles_use_case import ManageRolesUseCase
from .query_roles_use_case import QueryRolesUseCase
from .seed_permissions_use_case import SeedPermissionsUseCase
from .dtos import (
    CreateRoleCommand,
    PermissionListResponse,
    RoleDetail,
    RoleListResponse,
    UpdateRoleCommand,
)

__all__ = [
    "ManageRolesUseCase",
    "QueryRolesUseCase",
    "SeedPermissionsUseCase",
    "CreateRoleCommand",
    "PermissionListResponse",
    "RoleDetail",
    "RoleListResponse",
    "UpdateRoleCommand",
]
